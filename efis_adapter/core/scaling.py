"""Raw sensor unit to display unit scaling.

Every instrument field is scaled through a :class:`ScaleRule` looked up by a
dotted key such as ``"velocity.air_speed"``. The defaults below document the
raw unit each generator is expected to deliver:

==================================  ============  ==========  =======  ================
key                                 raw unit      display     factor   range
==================================  ============  ==========  =======  ================
heading.heading                     degrees       degrees     1.0      0..360 wrap
heading.selected_course             degrees       degrees     1.0      0..360 wrap
heading.course_deviation            1/100 dot     dots        0.01     -2.5..2.5 clamp
heading.glideslope_deviation        1/100 dot     dots        0.01     -2.5..2.5 clamp
vertical.vertical_speed             cm/s          ft/min      1.9685   -6000..6000 clamp
vertical.selected_vertical_speed    cm/s          ft/min      1.9685   -6000..6000 clamp
velocity.air_speed                  1/10 knot     knots       0.1      0..999 clamp
velocity.ground_speed               1/10 knot     knots       0.1      0..999 clamp
velocity.mach                       1/1000 Mach   Mach        0.001    pass
navigation.nav_mode                 mode code     code        1.0      pass
navigation.vertical_guidance        1/100 dot     dots        0.01     -2.5..2.5 clamp
inclinometer.slip                   1/10 degree   degrees     0.1      -15..15 clamp
==================================  ============  ==========  =======  ================
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from .errors import ConfigError

SCALE_MODES = ("clamp", "pass", "wrap")


@dataclass(frozen=True)
class ScaleRule:
    """Linear conversion from a raw integer to a display float."""

    factor: float
    offset: float = 0.0
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    mode: str = "clamp"
    precision: int = 3

    def __post_init__(self) -> None:
        if self.mode not in SCALE_MODES:
            raise ValueError(f"unknown scale mode '{self.mode}'")
        if self.minimum is not None and self.maximum is not None and self.minimum >= self.maximum:
            raise ValueError("minimum must be below maximum")
        if self.mode == "wrap" and (self.minimum is None or self.maximum is None):
            raise ValueError("wrap mode needs both minimum and maximum")

    def apply(self, raw: float) -> float:
        value = raw * self.factor + self.offset
        if self.mode == "wrap":
            assert self.minimum is not None and self.maximum is not None
            span = self.maximum - self.minimum
            value = (value - self.minimum) % span + self.minimum
        elif self.mode == "clamp":
            if self.minimum is not None:
                value = max(self.minimum, value)
            if self.maximum is not None:
                value = min(self.maximum, value)
        return round(float(value), self.precision)

    @classmethod
    def from_mapping(cls, key: str, data: Mapping[str, object]) -> "ScaleRule":
        if "factor" not in data:
            raise ConfigError(f"scaling rule '{key}' is missing 'factor'")
        unknown = set(data) - {"factor", "offset", "minimum", "maximum", "mode", "precision"}
        if unknown:
            raise ConfigError(f"scaling rule '{key}' has unknown keys: {', '.join(sorted(unknown))}")
        try:
            return cls(
                factor=float(data["factor"]),
                offset=float(data.get("offset", 0.0)),
                minimum=_optional_float(data.get("minimum")),
                maximum=_optional_float(data.get("maximum")),
                mode=str(data.get("mode", "clamp")),
                precision=int(data.get("precision", 3)),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"scaling rule '{key}' is invalid: {exc}") from exc


def _optional_float(value: object) -> Optional[float]:
    if value is None:
        return None
    return float(value)  # type: ignore[arg-type]


class ScalingTable:
    """Read-only mapping of field keys to :class:`ScaleRule` objects."""

    def __init__(self, rules: Mapping[str, ScaleRule]) -> None:
        self._rules: Mapping[str, ScaleRule] = MappingProxyType(dict(rules))

    def scale(self, key: str, raw: float) -> float:
        try:
            rule = self._rules[key]
        except KeyError:
            raise KeyError(f"no scaling rule for '{key}'") from None
        return rule.apply(raw)

    def with_overrides(self, overrides: Mapping[str, Mapping[str, object]]) -> "ScalingTable":
        """Return a copy where the rules named in *overrides* are replaced.

        Override mappings may omit ``factor`` when the key already has a
        default rule; the remaining attributes are then inherited.
        """

        rules: Dict[str, ScaleRule] = dict(self._rules)
        for key, data in overrides.items():
            if not isinstance(data, Mapping):
                raise ConfigError(f"scaling rule '{key}' must be a mapping")
            base = rules.get(key)
            if base is not None and "factor" not in data:
                merged = {
                    "factor": base.factor,
                    "offset": base.offset,
                    "minimum": base.minimum,
                    "maximum": base.maximum,
                    "mode": base.mode,
                    "precision": base.precision,
                }
                merged.update(data)
                rules[key] = ScaleRule.from_mapping(key, merged)
            else:
                rules[key] = ScaleRule.from_mapping(key, data)
        return ScalingTable(rules)


_COMPASS = ScaleRule(factor=1.0, minimum=0.0, maximum=360.0, mode="wrap", precision=1)
_DEVIATION = ScaleRule(factor=0.01, minimum=-2.5, maximum=2.5)
_VERTICAL_SPEED = ScaleRule(factor=1.9685, minimum=-6000.0, maximum=6000.0, precision=0)
_KNOTS = ScaleRule(factor=0.1, minimum=0.0, maximum=999.0, precision=1)

DEFAULT_SCALING = ScalingTable(
    {
        "heading.heading": _COMPASS,
        "heading.selected_course": _COMPASS,
        "heading.course_deviation": _DEVIATION,
        "heading.glideslope_deviation": _DEVIATION,
        "vertical.vertical_speed": _VERTICAL_SPEED,
        "vertical.selected_vertical_speed": _VERTICAL_SPEED,
        "velocity.air_speed": _KNOTS,
        "velocity.ground_speed": _KNOTS,
        "velocity.mach": ScaleRule(factor=0.001, mode="pass"),
        "navigation.nav_mode": ScaleRule(factor=1.0, mode="pass", precision=0),
        "navigation.vertical_guidance": _DEVIATION,
        "inclinometer.slip": ScaleRule(factor=0.1, minimum=-15.0, maximum=15.0, precision=1),
    }
)
