"""Message sink used to surface status and error text to the user."""

from __future__ import annotations

import logging
from typing import Mapping, Protocol, runtime_checkable

LOG = logging.getLogger(__name__)

MESSAGES: Mapping[str, str] = {
    "autoloading-known-drivers": "No known driver to handle \"{url}\". Searching for known drivers...",
    "connected": "Connected to: {product} (version {version})",
    "driver": "Driver: {name} (version {version})",
    "closing": "Closing: {connection}",
    "autocommit-status": "Autocommit status: {enabled}",
    "isolation-status": "Transaction isolation: {level}",
    "connection-warning": "Warning: {warning}",
    "unsupported-quoting": "{error}",
    "error": "Error: {error}",
}


@runtime_checkable
class MessageSink(Protocol):
    """Receives named messages; rendering and localization are up to the sink."""

    def output(self, key: str, **params: object) -> None: ...

    def debug(self, key: str, **params: object) -> None: ...

    def error(self, key: str, **params: object) -> None: ...


def render_message(key: str, **params: object) -> str:
    """Render ``key`` from the catalog, falling back to the raw key."""

    template = MESSAGES.get(key)
    if template is None:
        return key if not params else f"{key}: {params}"
    try:
        return template.format(**params)
    except (KeyError, IndexError):
        return template


class LogMessageSink:
    """Default sink that writes rendered messages to :mod:`logging`."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or LOG

    def output(self, key: str, **params: object) -> None:
        self._log.info(render_message(key, **params), extra={"message_key": key})

    def debug(self, key: str, **params: object) -> None:
        self._log.debug(render_message(key, **params), extra={"message_key": key})

    def error(self, key: str, **params: object) -> None:
        self._log.error(render_message(key, **params), extra={"message_key": key})


__all__ = ["LogMessageSink", "MESSAGES", "MessageSink", "render_message"]
