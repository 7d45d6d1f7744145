"""Tests for message rendering and the logging sink."""

from __future__ import annotations

import logging

import pytest

from sqlrepl.messages import LogMessageSink, MessageSink, render_message


def test_render_message_formats_catalog_entries() -> None:
    assert render_message("connected", product="SQLite", version="3.45") == "Connected to: SQLite (version 3.45)"


def test_render_message_falls_back_for_unknown_keys_and_missing_params() -> None:
    assert render_message("custom") == "custom"
    assert render_message("closing") == "Closing: {connection}"


def test_log_sink_routes_channels_to_levels(caplog: pytest.LogCaptureFixture) -> None:
    sink = LogMessageSink(logging.getLogger("sqlrepl.test"))

    with caplog.at_level(logging.DEBUG, logger="sqlrepl.test"):
        sink.output("closing", connection="demo")
        sink.debug("autocommit-status", enabled=True)
        sink.error("error", error="boom")

    assert [(record.levelno, record.getMessage()) for record in caplog.records] == [
        (logging.INFO, "Closing: demo"),
        (logging.DEBUG, "Autocommit status: True"),
        (logging.ERROR, "Error: boom"),
    ]
    assert caplog.records[0].message_key == "closing"
    assert isinstance(sink, MessageSink)
