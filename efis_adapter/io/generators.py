"""Generator implementations backing the redundant source reader."""

from __future__ import annotations

import math
import threading
import time
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.airframe import AirframeData, HeadingGroup, VelocityGroup, VerticalGroup
from ..core.categories import Category
from ..core.errors import SourceReadError
from ..core.inclinometer import InclinometerSample
from ..core.navigation import APSystemState, NavMode
from ..core.roles import SourceRole
from .recorder import AirframeRecording


class SimulatedGenerator:
    """Deterministic sine/cosine airframe generator for demos and tests.

    Each role gets its own phase so that fallbacks are visible in the output.
    Roles listed in *offline* return no data and roles in *failing* raise
    :class:`SourceReadError`.
    """

    def __init__(
        self,
        *,
        seed: int = 0,
        offline: Iterable[SourceRole] = (),
        failing: Iterable[SourceRole] = (),
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._seed = seed
        self.offline = set(offline)
        self.failing = set(failing)
        self._clock = clock
        self._lock = threading.Lock()
        self.reads: List[Tuple[SourceRole, str]] = []

    def read(self, role: SourceRole, category: Category) -> Optional[AirframeData]:
        with self._lock:
            self.reads.append((role, category.id))
        if role in self.failing:
            raise SourceReadError(f"{role.value} generator not responding")
        if role in self.offline:
            return None
        return self._generate(role, category, self._clock())

    def _generate(self, role: SourceRole, category: Category, timestamp: float) -> AirframeData:
        phase = self._seed + list(SourceRole).index(role) * math.pi / 3
        t = timestamp * 0.1 + phase
        heading = int(round((math.sin(t * 0.2) * 180 + 180) % 360))
        return AirframeData(
            category_id=category.id,
            heading=HeadingGroup(
                heading=heading,
                selected_course=(heading + 10) % 360,
                course_deviation=int(math.sin(t) * 120),
                glideslope_deviation=int(math.cos(t * 0.7) * 80),
            ),
            vertical=VerticalGroup(
                vertical_speed=int(math.sin(t * 0.5) * 500),
                selected_vertical_speed=500,
            ),
            velocity=VelocityGroup(
                air_speed=int(2500 + math.sin(t * 0.3) * 150),
                ground_speed=int(2650 + math.sin(t * 0.3) * 150),
                mach=int(380 + math.sin(t * 0.3) * 20),
            ),
            timestamp=timestamp,
            role=role,
        )


class SimulatedAutopilot:
    """Autopilot source reporting a fixed mode per category."""

    def __init__(self, modes: Optional[Dict[str, NavMode]] = None, *, default: NavMode = NavMode.LNAV) -> None:
        self._modes = dict(modes or {})
        self._default = default

    def read(self, category: Category) -> Optional[APSystemState]:
        mode = self._modes.get(category.id, self._default)
        return APSystemState(
            category_id=category.id,
            nav_mode=mode,
            engaged=mode is not NavMode.OFF,
            vertical_guidance=-35 if mode is NavMode.LNAV else None,
        )


class SimulatedInclinometer:
    """Slip samples for a fixed set of sensor arrays."""

    def __init__(self, arrays: Sequence[str] = ("left", "right"), *, clock: Callable[[], float] = time.time) -> None:
        self._arrays = tuple(arrays)
        self._clock = clock

    def read(self) -> List[InclinometerSample]:
        t = self._clock()
        return [
            InclinometerSample(sensor_array=name, slip=int(math.sin(t + idx) * 40))
            for idx, name in enumerate(self._arrays)
        ]


class ReplayGenerator:
    """Serve the latest recorded airframe record per role and category."""

    def __init__(self, records: Iterable[AirframeData]) -> None:
        self._records: Dict[Tuple[SourceRole, str], AirframeData] = {}
        for record in records:
            if record.role is None:
                continue
            key = (record.role, record.category_id)
            current = self._records.get(key)
            if current is None or record.timestamp >= current.timestamp:
                self._records[key] = record

    @classmethod
    def from_file(cls, path: str) -> "ReplayGenerator":
        """Load *path*; unreadable or malformed recordings raise :class:`RecordingError`."""

        return cls(AirframeRecording(path))

    def __len__(self) -> int:
        return len(self._records)

    def read(self, role: SourceRole, category: Category) -> Optional[AirframeData]:
        return self._records.get((role, category.id))
