"""Driver registry: which driver claims which URL."""

from __future__ import annotations

import importlib
import importlib.metadata as metadata
import inspect
import logging
from typing import Iterable

from ..errors import DriverResolutionError
from .base import Driver

LOG = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "sqlrepl.drivers"

KNOWN_DRIVERS: tuple[str, ...] = (
    "sqlrepl.drivers.sqlite:SqliteDriver",
    "sqlrepl.drivers.postgres:AsyncpgDriver",
)


class DriverRegistry:
    """Holds registered drivers in registration order."""

    def __init__(
        self,
        drivers: Iterable[Driver] | None = None,
        *,
        known_drivers: Iterable[str] = KNOWN_DRIVERS,
        entry_point_group: str = ENTRY_POINT_GROUP,
    ) -> None:
        self._drivers: list[Driver] = list(drivers or [])
        self._known_drivers = tuple(known_drivers)
        self._entry_point_group = entry_point_group

    @property
    def drivers(self) -> tuple[Driver, ...]:
        return tuple(self._drivers)

    def register(self, driver: Driver) -> Driver:
        """Add ``driver`` unless a driver of the same class is already present."""

        for existing in self._drivers:
            if type(existing) is type(driver):
                return existing
        self._drivers.append(driver)
        LOG.debug("Registered driver", extra={"driver": driver.name})
        return driver

    def driver_for(self, url: str) -> Driver | None:
        """First registered driver that claims ``url``."""

        for driver in self._drivers:
            try:
                if driver.accepts_url(url):
                    return driver
            except Exception:  # pragma: no cover - misbehaving third-party driver
                LOG.exception("Driver failed to inspect URL", extra={"driver": driver.name})
        return None

    def load_driver(self, path: str) -> Driver:
        """Import ``module:attribute`` and register the driver it names."""

        module_name, _, attribute = path.partition(":")
        try:
            module = importlib.import_module(module_name)
            obj = getattr(module, attribute) if attribute else module
        except (ImportError, AttributeError) as exc:
            raise DriverResolutionError(f"Cannot load driver '{path}': {exc}") from exc
        return self.register(_instantiate(obj))

    def load_known_drivers(self) -> list[Driver]:
        """Register every known and entry-point advertised driver that imports cleanly."""

        loaded: list[Driver] = []
        for path in self._known_drivers:
            try:
                loaded.append(self.load_driver(path))
            except DriverResolutionError as exc:
                LOG.debug(str(exc), extra={"driver": path})
        group = metadata.entry_points().select(group=self._entry_point_group)
        for entry_point in sorted(group, key=lambda ep: ep.name):
            try:
                loaded.append(self.register(_instantiate(entry_point.load())))
            except Exception:  # pragma: no cover
                LOG.exception("Driver entry point failed to load", extra={"driver": entry_point.name})
        return loaded


def _instantiate(obj: object) -> Driver:
    if inspect.isclass(obj):
        return obj()  # type: ignore[return-value]
    return obj  # type: ignore[return-value]


DEFAULT_REGISTRY = DriverRegistry()


__all__ = ["DEFAULT_REGISTRY", "DriverRegistry", "ENTRY_POINT_GROUP", "KNOWN_DRIVERS"]
