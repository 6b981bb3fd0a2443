"""Autopilot navigation-mode state and its resolver."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional, Protocol

from .categories import Category
from .errors import NavDataUnavailable, SourceReadError
from .scaling import DEFAULT_SCALING, ScalingTable
from .sources import SourceWorker

log = logging.getLogger(__name__)


class NavMode(IntEnum):
    OFF = 0
    HDG = 1
    VOR = 2
    LOC = 3
    LNAV = 4
    VNAV = 5
    APPR = 6


@dataclass(frozen=True)
class APSystemState:
    """Autopilot/navigation state for one category, in raw units."""

    category_id: str
    nav_mode: NavMode = NavMode.OFF
    engaged: bool = False
    vertical_guidance: Optional[int] = None


@dataclass(frozen=True)
class NavModeView:
    nav_mode: float
    mode_name: str
    engaged: bool
    vertical_guidance: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nav_mode": self.nav_mode,
            "mode_name": self.mode_name,
            "engaged": self.engaged,
            "vertical_guidance": self.vertical_guidance,
        }


class AutopilotRead(Protocol):
    """Capability reading autopilot state; ``None`` when nothing is known."""

    def read(self, category: Category) -> Optional[APSystemState]:  # pragma: no cover - protocol signature
        ...


def split_nav_mode(state: APSystemState, scaling: ScalingTable = DEFAULT_SCALING) -> NavModeView:
    """Convert *state* into display units.

    Vertical guidance is only meaningful while LNAV is the active lateral
    mode; other modes report ``None``.
    """

    guidance: Optional[float] = None
    if state.nav_mode is NavMode.LNAV and state.vertical_guidance is not None:
        guidance = scaling.scale("navigation.vertical_guidance", state.vertical_guidance)
    return NavModeView(
        nav_mode=scaling.scale("navigation.nav_mode", int(state.nav_mode)),
        mode_name=state.nav_mode.name,
        engaged=state.engaged,
        vertical_guidance=guidance,
    )


class NavigationModeResolver:
    """Read navigation-mode state from a single autopilot source."""

    def __init__(self, autopilot: AutopilotRead, *, timeout: float = 0.25) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._autopilot = autopilot
        self._timeout = timeout
        self._worker = SourceWorker("autopilot")

    async def read_nav_mode(self, category: Category) -> APSystemState:
        try:
            state = await self._worker.call(self._autopilot.read, category, timeout=self._timeout)
        except asyncio.TimeoutError:
            log.warning("autopilot read timed out for %s", category.id)
            raise NavDataUnavailable(f"autopilot read timed out for '{category.id}'") from None
        except (SourceReadError, OSError) as exc:
            log.warning("autopilot read failed for %s: %s", category.id, exc)
            raise NavDataUnavailable(f"autopilot read failed for '{category.id}': {exc}") from exc
        if state is None:
            raise NavDataUnavailable(f"no autopilot state for '{category.id}'")
        return state

    def close(self) -> None:
        self._worker.close()
