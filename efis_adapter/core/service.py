"""Instrument readout operations exposed to the presentation layer."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from .airframe import AirframeData
from .categories import Category, CategoryResolver, CategoryTable
from .config import AdapterConfig
from .errors import (
    AllSourcesFailed,
    CategoryDisabled,
    NavDataUnavailable,
    SourceReadError,
    UnknownCategory,
)
from .inclinometer import InclinometerRead, InclinometerView, split_inclinometer
from .navigation import AutopilotRead, NavigationModeResolver, NavModeView, split_nav_mode
from .roles import SourceRole
from .sanitize import MarkupSanitizer, SanitizedIdentifier, Sanitizer
from .scaling import DEFAULT_SCALING, ScalingTable
from .sources import GeneratorRead, RedundantSourceReader, SourceWorker
from .views import InstrumentView, split_hsi, split_velocity, split_vsi

log = logging.getLogger(__name__)

View = Union[InstrumentView, NavModeView, List[InclinometerView]]


class ReadoutStatus(str, Enum):
    OK = "ok"
    NO_DATA = "no_data"
    SOURCES_FAILED = "sources_failed"
    NAV_UNAVAILABLE = "nav_unavailable"


@dataclass(frozen=True)
class Readout:
    """Result of one instrument request.

    ``category_id`` always holds the sanitized identifier. Unavailable
    readouts carry no view, so a display never renders stale values.
    """

    instrument: str
    category_id: str
    status: ReadoutStatus
    view: Optional[View] = None
    role: Optional[SourceRole] = None
    reason: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.status is ReadoutStatus.OK

    def to_dict(self) -> Dict[str, Any]:
        view: Any = None
        if isinstance(self.view, list):
            view = [item.to_dict() for item in self.view]
        elif self.view is not None:
            view = self.view.to_dict()
        return {
            "instrument": self.instrument,
            "category_id": self.category_id,
            "status": self.status.value,
            "available": self.available,
            "role": self.role.value if self.role else None,
            "reason": self.reason,
            "view": view,
        }


Splitter = Callable[[AirframeData, ScalingTable], InstrumentView]


class InstrumentService:
    """Resolve readouts for each instrument domain.

    Every collaborator is passed in explicitly. Request handling keeps no
    per-request state on the service, so one instance can serve concurrent
    requests; only the source workers remember a stalled read.
    """

    def __init__(
        self,
        categories: CategoryResolver,
        reader: RedundantSourceReader,
        navigation: NavigationModeResolver,
        sanitizer: Sanitizer,
        *,
        scaling: ScalingTable = DEFAULT_SCALING,
        inclinometer: Optional[InclinometerRead] = None,
        inclinometer_timeout: float = 0.25,
    ) -> None:
        self._categories = categories
        self._reader = reader
        self._navigation = navigation
        self._sanitizer = sanitizer
        self._scaling = scaling
        self._inclinometer = inclinometer
        self._inclinometer_timeout = inclinometer_timeout
        self._inclinometer_worker = SourceWorker("inclinometer") if inclinometer is not None else None

    @property
    def categories(self) -> CategoryResolver:
        return self._categories

    @property
    def roles(self) -> tuple[SourceRole, ...]:
        return self._reader.roles

    @property
    def stalled_roles(self) -> tuple[SourceRole, ...]:
        return self._reader.stalled_roles

    def sanitize(self, raw: str) -> SanitizedIdentifier:
        return SanitizedIdentifier.wrap(raw, self._sanitizer)

    async def hsi_readout(self, category_id: str) -> Readout:
        return await self._airframe_readout("hsi", category_id, split_hsi)

    async def vsi_readout(self, category_id: str) -> Readout:
        return await self._airframe_readout("vsi", category_id, split_vsi)

    async def speed_readout(self, category_id: str) -> Readout:
        return await self._airframe_readout("speed", category_id, split_velocity)

    async def nav_mode_readout(self, category_id: str) -> Readout:
        identifier = self.sanitize(category_id)
        category = self._resolve(identifier)
        try:
            state = await self._navigation.read_nav_mode(category)
        except NavDataUnavailable as exc:
            return Readout("nav_mode", identifier.value, ReadoutStatus.NAV_UNAVAILABLE, reason=str(exc))
        return Readout(
            "nav_mode", identifier.value, ReadoutStatus.OK, view=split_nav_mode(state, self._scaling)
        )

    async def inclinometer_readout(self, sensor_key: str) -> Readout:
        identifier = self.sanitize(sensor_key)
        if self._inclinometer is None or self._inclinometer_worker is None:
            return Readout(
                "inclinometer", identifier.value, ReadoutStatus.NO_DATA, reason="no inclinometer source"
            )
        try:
            samples = await self._inclinometer_worker.call(
                self._inclinometer.read, timeout=self._inclinometer_timeout
            )
        except (SourceReadError, OSError, asyncio.TimeoutError) as exc:
            reason = "timeout" if isinstance(exc, asyncio.TimeoutError) else str(exc)
            log.warning("inclinometer read failed for %s: %s", identifier.value, reason)
            return Readout("inclinometer", identifier.value, ReadoutStatus.SOURCES_FAILED, reason=reason)
        views = split_inclinometer(samples, sensor_key, self._scaling)
        if not views:
            return Readout("inclinometer", identifier.value, ReadoutStatus.NO_DATA)
        return Readout("inclinometer", identifier.value, ReadoutStatus.OK, view=views)

    def _resolve(self, identifier: SanitizedIdentifier) -> Category:
        try:
            return self._categories.resolve(identifier.raw)
        except CategoryDisabled:
            log.info("rejected disabled category %r", identifier.value)
            raise CategoryDisabled(identifier.value) from None
        except UnknownCategory as exc:
            log.info("rejected unknown category %r", identifier.value)
            raise UnknownCategory(identifier.value, exc.available) from None

    async def _airframe_readout(self, instrument: str, category_id: str, splitter: Splitter) -> Readout:
        identifier = self.sanitize(category_id)
        category = self._resolve(identifier)
        try:
            data = await self._reader.read(category)
        except AllSourcesFailed as exc:
            return Readout(instrument, identifier.value, ReadoutStatus.SOURCES_FAILED, reason=str(exc))
        if data is None:
            return Readout(instrument, identifier.value, ReadoutStatus.NO_DATA)
        view = splitter(data, self._scaling)
        return Readout(instrument, identifier.value, ReadoutStatus.OK, view=view, role=data.role)

    def close(self) -> None:
        """Release the worker threads owned by the data sources."""

        self._reader.close()
        self._navigation.close()
        if self._inclinometer_worker is not None:
            self._inclinometer_worker.close()


def build_service(
    config: AdapterConfig,
    generator: GeneratorRead,
    autopilot: AutopilotRead,
    *,
    sanitizer: Optional[Sanitizer] = None,
    inclinometer: Optional[InclinometerRead] = None,
) -> InstrumentService:
    """Wire an :class:`InstrumentService` from *config* and its data sources."""

    return InstrumentService(
        CategoryResolver(CategoryTable(config.categories)),
        RedundantSourceReader(generator, config.roles, role_timeout=config.role_timeout),
        NavigationModeResolver(autopilot, timeout=config.nav_timeout),
        sanitizer or MarkupSanitizer(),
        scaling=config.scaling,
        inclinometer=inclinometer,
        inclinometer_timeout=config.inclinometer_timeout,
    )
