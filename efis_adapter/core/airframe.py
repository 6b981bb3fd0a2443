"""Unified airframe record produced by a generator read."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from .roles import SourceRole

_G = TypeVar("_G")


@dataclass(frozen=True)
class HeadingGroup:
    """Heading/situation fields in raw sensor units."""

    heading: int = 0
    selected_course: int = 0
    course_deviation: int = 0
    glideslope_deviation: int = 0


@dataclass(frozen=True)
class VerticalGroup:
    """Vertical speed fields in raw sensor units."""

    vertical_speed: int = 0
    selected_vertical_speed: int = 0


@dataclass(frozen=True)
class VelocityGroup:
    """Velocity fields in raw sensor units."""

    air_speed: int = 0
    ground_speed: int = 0
    mach: int = 0


def _group_from_mapping(cls: Type[_G], data: Mapping[str, Any] | None) -> _G:
    data = data or {}
    values = {}
    for item in fields(cls):  # type: ignore[arg-type]
        if item.name in data:
            values[item.name] = int(data[item.name])
    return cls(**values)


@dataclass(frozen=True)
class AirframeData:
    """Snapshot of flight-relevant sensor state for one category.

    Records are never mutated after creation; :mod:`efis_adapter.core.views`
    derives instrument views from them without taking ownership.
    """

    category_id: str
    heading: HeadingGroup = field(default_factory=HeadingGroup)
    vertical: VerticalGroup = field(default_factory=VerticalGroup)
    velocity: VelocityGroup = field(default_factory=VelocityGroup)
    timestamp: float = field(default_factory=time.time)
    role: Optional[SourceRole] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AirframeData":
        role = data.get("role")
        return cls(
            category_id=str(data["category_id"]),
            heading=_group_from_mapping(HeadingGroup, data.get("heading")),
            vertical=_group_from_mapping(VerticalGroup, data.get("vertical")),
            velocity=_group_from_mapping(VelocityGroup, data.get("velocity")),
            timestamp=float(data.get("timestamp", time.time())),
            role=SourceRole(role) if role else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["role"] = self.role.value if self.role else None
        return out
