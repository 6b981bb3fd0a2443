"""Inclinometer (slip indicator) samples keyed by sensor array."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Protocol, Sequence

from .scaling import DEFAULT_SCALING, ScalingTable


@dataclass(frozen=True)
class InclinometerSample:
    sensor_array: str
    slip: int


@dataclass(frozen=True)
class InclinometerView:
    sensor_array: str
    slip_deg: float

    def to_dict(self) -> Dict[str, Any]:
        return {"sensor_array": self.sensor_array, "slip_deg": self.slip_deg}


class InclinometerRead(Protocol):
    def read(self) -> Sequence[InclinometerSample]:  # pragma: no cover - protocol signature
        ...


def split_inclinometer(
    samples: Iterable[InclinometerSample],
    sensor_key: str,
    scaling: ScalingTable = DEFAULT_SCALING,
) -> List[InclinometerView]:
    """Return the scaled samples belonging to the *sensor_key* array."""

    return [
        InclinometerView(sample.sensor_array, scaling.scale("inclinometer.slip", sample.slip))
        for sample in samples
        if sample.sensor_array == sensor_key
    ]
