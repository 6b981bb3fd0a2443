"""Instrument views split out of an :class:`AirframeData` record."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .airframe import AirframeData
from .roles import SourceRole
from .scaling import DEFAULT_SCALING, ScalingTable


@dataclass(frozen=True)
class InstrumentView:
    """Base class for scaled, read-only instrument projections."""

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        role = out.get("role")
        if isinstance(role, SourceRole):
            out["role"] = role.value
        return out


@dataclass(frozen=True)
class HSIView(InstrumentView):
    heading: float
    selected_course: float
    course_deviation: float
    glideslope_deviation: float
    role: Optional[SourceRole] = None


@dataclass(frozen=True)
class VSIView(InstrumentView):
    vertical_speed: float
    selected_vertical_speed: float
    role: Optional[SourceRole] = None


@dataclass(frozen=True)
class VelocityView(InstrumentView):
    air_speed: float
    ground_speed: float
    mach: float
    role: Optional[SourceRole] = None


def split_hsi(data: AirframeData, scaling: ScalingTable = DEFAULT_SCALING) -> HSIView:
    group = data.heading
    return HSIView(
        heading=scaling.scale("heading.heading", group.heading),
        selected_course=scaling.scale("heading.selected_course", group.selected_course),
        course_deviation=scaling.scale("heading.course_deviation", group.course_deviation),
        glideslope_deviation=scaling.scale(
            "heading.glideslope_deviation", group.glideslope_deviation
        ),
        role=data.role,
    )


def split_vsi(data: AirframeData, scaling: ScalingTable = DEFAULT_SCALING) -> VSIView:
    group = data.vertical
    return VSIView(
        vertical_speed=scaling.scale("vertical.vertical_speed", group.vertical_speed),
        selected_vertical_speed=scaling.scale(
            "vertical.selected_vertical_speed", group.selected_vertical_speed
        ),
        role=data.role,
    )


def split_velocity(data: AirframeData, scaling: ScalingTable = DEFAULT_SCALING) -> VelocityView:
    group = data.velocity
    return VelocityView(
        air_speed=scaling.scale("velocity.air_speed", group.air_speed),
        ground_speed=scaling.scale("velocity.ground_speed", group.ground_speed),
        mach=scaling.scale("velocity.mach", group.mach),
        role=data.role,
    )
