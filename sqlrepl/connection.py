"""Connection lifecycle: connect, reconnect, close, and schema introspection."""

from __future__ import annotations

import logging
import threading
from typing import Mapping

from .completion import ArgumentCompleter, SqlCompleter, WordDelimiter
from .config import ShellOptions
from .drivers.base import Connection, DatabaseMetadata, Driver
from .drivers.registry import DEFAULT_REGISTRY, DriverRegistry
from .errors import (
    ConnectionBackendError,
    DataAccessError,
    DriverResolutionError,
    UnsupportedQuotingError,
)
from .messages import LogMessageSink, MessageSink
from .quoting import IdentifierQuoting, detect_quoting
from .schema import Schema
from .sqlintel import SchemaMetadataProvider, SqlIntelService

LOG = logging.getLogger(__name__)


class ConnectionManager:
    """Owns a single database connection and the metadata derived from it.

    At most one live handle exists at a time: :meth:`connect` always closes
    the previous one first. The handle and its metadata provider are set and
    cleared together.
    """

    def __init__(
        self,
        url: str,
        *,
        driver: str | None = None,
        user: str | None = None,
        password: str | None = None,
        options: ShellOptions | None = None,
        registry: DriverRegistry | None = None,
        messages: MessageSink | None = None,
    ) -> None:
        self._url = url
        self._driver_path = driver
        self._user = user
        self._password = password
        self._options = options or ShellOptions()
        self._registry = registry if registry is not None else DEFAULT_REGISTRY
        self._messages = messages or LogMessageSink()
        self._connection: Connection | None = None
        self._metadata: DatabaseMetadata | None = None
        self._quoting: IdentifierQuoting | None = None
        self._schema: Schema | None = None
        self._completer: ArgumentCompleter | None = None
        self._lock = threading.RLock()

    def __str__(self) -> str:
        return self._url

    @property
    def url(self) -> str:
        return self._url

    @property
    def options(self) -> ShellOptions:
        return self._options

    @property
    def metadata(self) -> DatabaseMetadata | None:
        return self._metadata

    @property
    def quoting(self) -> IdentifierQuoting | None:
        return self._quoting

    @property
    def completer(self) -> ArgumentCompleter | None:
        return self._completer

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    @property
    def lock(self) -> threading.RLock:
        """Serializes use of the handle between the shell and completion workers."""

        return self._lock

    def connect(self) -> bool:
        """Open a fresh connection, replacing any existing one.

        Raises :class:`DriverResolutionError` when no driver claims the URL,
        :class:`AuthenticationError` when credentials are rejected and
        :class:`ConnectionBackendError` for other connection failures.
        """

        driver = self._resolve_driver()
        self.close()
        if driver is None:
            raise DriverResolutionError(f"No suitable driver found for '{self._url}'.")

        info: Mapping[str, str | None] = {"user": self._user, "password": self._password}
        try:
            connection = driver.connect(self._url, info)
        except ConnectionBackendError:
            raise
        except Exception as exc:
            raise ConnectionBackendError(f"Failed to connect to '{self._url}': {exc}") from exc
        try:
            metadata = connection.metadata()
            quoting = self._detect_quoting(metadata)
        except Exception as exc:
            _close_quietly(connection)
            raise ConnectionBackendError(f"Failed to read metadata for '{self._url}': {exc}") from exc

        # a Schema created before the first connect stays the cache for this handle
        self._connection, self._metadata = connection, metadata
        self._quoting = quoting
        self._report_versions()
        self._apply_autocommit()
        self._apply_isolation()
        self._show_warnings()
        LOG.debug("Connected", extra={"url": self._url, "driver": driver.name})
        return True

    def get_connection(self) -> Connection:
        """Return the live handle, connecting first when there is none."""

        if self._connection is not None:
            return self._connection
        self.connect()
        if self._connection is None:  # pragma: no cover - connect() raises instead
            raise ConnectionBackendError(f"No connection available for '{self._url}'.")
        return self._connection

    def reconnect(self) -> Connection:
        self.close()
        return self.get_connection()

    def close(self) -> None:
        """Close the handle if open; always forget it afterwards.

        The schema cache and completer belong to the handle, so they are
        dropped only when there was one.
        """

        connection = self._connection
        try:
            if connection is not None and not connection.closed:
                self._messages.output("closing", connection=connection)
                connection.close()
        except Exception as exc:
            LOG.debug("Close failed", extra={"url": self._url, "error": str(exc)})
            self._messages.error("error", error=exc)
        finally:
            self._connection = None
            self._metadata = None
            if connection is not None:
                self._schema = None
                self._completer = None

    def set_completions(self, skip_metadata: bool | None = None) -> ArgumentCompleter:
        """Build the completion grammar for the connected dialect.

        Requires a live connection; errors from the metadata provider propagate.
        """

        metadata = self._require_metadata()
        self._quoting = self._detect_quoting(metadata)
        extra = metadata.extra_name_characters() or ""
        if skip_metadata is None:
            skip_metadata = self._options.skip_metadata
        provider = None
        if not skip_metadata:
            provider = SchemaMetadataProvider(
                self.schema,
                quoting=self._quoting,
                extra_name_characters=extra,
            )
        completer = ArgumentCompleter(
            WordDelimiter(extra),
            SqlCompleter(SqlIntelService(provider)),
            strict=False,
        )
        self._completer = completer
        return completer

    @property
    def schema(self) -> Schema:
        """Schema cache bound to the current connection lifetime."""

        if self._schema is None:
            self._schema = Schema(self._metadata_source, strict=self._options.strict_metadata)
        return self._schema

    def invalidate_schema(self) -> None:
        self._schema = None
        self._completer = None

    def table_names(self) -> list[str]:
        return self.schema.table_names()

    def _metadata_source(self) -> tuple[Connection, DatabaseMetadata]:
        connection = self.get_connection()
        metadata = self._require_metadata()
        return connection, metadata

    def _require_metadata(self) -> DatabaseMetadata:
        if self._metadata is None:
            raise DataAccessError(f"Not connected to '{self._url}'.")
        return self._metadata

    def _resolve_driver(self) -> Driver | None:
        if self._driver_path:
            self._registry.load_driver(self._driver_path)
        driver = self._registry.driver_for(self._url)
        if driver is None:
            self._messages.output("autoloading-known-drivers", url=self._url)
            self._registry.load_known_drivers()
            driver = self._registry.driver_for(self._url)
        return driver

    def _detect_quoting(self, metadata: DatabaseMetadata) -> IdentifierQuoting:
        try:
            quote = metadata.identifier_quote_string()
            upper = metadata.stores_upper_case_identifiers()
            product = metadata.database_product_name()
        except DataAccessError:
            raise
        except Exception as exc:
            raise DataAccessError(f"Failed to read quoting metadata: {exc}") from exc
        return detect_quoting(quote, upper, product, on_error=self._report_quoting_error)

    def _report_quoting_error(self, error: UnsupportedQuotingError) -> None:
        self._messages.error("unsupported-quoting", error=error)

    def _report_versions(self) -> None:
        metadata = self._metadata
        if metadata is None:
            return
        try:
            self._messages.debug(
                "connected",
                product=metadata.database_product_name(),
                version=metadata.database_product_version(),
            )
        except Exception as exc:
            self._messages.error("error", error=exc)
        try:
            self._messages.debug("driver", name=metadata.driver_name(), version=metadata.driver_version())
        except Exception as exc:
            self._messages.error("error", error=exc)

    def _apply_autocommit(self) -> None:
        connection = self._connection
        if connection is None:
            return
        try:
            connection.set_autocommit(self._options.auto_commit)
            self._messages.debug("autocommit-status", enabled=connection.autocommit)
        except Exception as exc:
            LOG.debug("Auto-commit could not be applied", extra={"error": str(exc)})
            self._messages.error("error", error=exc)

    def _apply_isolation(self) -> None:
        connection = self._connection
        if connection is None:
            return
        try:
            connection.set_isolation(self._options.isolation)
            self._messages.debug("isolation-status", level=self._options.isolation.value)
        except Exception as exc:
            LOG.debug("Isolation level could not be applied", extra={"error": str(exc)})
            self._messages.error("error", error=exc)

    def _show_warnings(self) -> None:
        connection = self._connection
        if connection is None:
            return
        try:
            for warning in connection.warnings():
                self._messages.output("connection-warning", warning=warning)
        except Exception as exc:
            self._messages.error("error", error=exc)


def _close_quietly(connection: Connection) -> None:
    try:
        connection.close()
    except Exception:  # pragma: no cover - best effort cleanup
        LOG.debug("Closing a half-open connection failed", exc_info=True)


__all__ = ["ConnectionManager"]
