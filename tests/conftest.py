from __future__ import annotations

import threading
from typing import Callable, Dict, List, Optional, Union

import pytest

from efis_adapter.core.airframe import AirframeData, HeadingGroup, VelocityGroup, VerticalGroup
from efis_adapter.core.categories import Category, CategoryResolver
from efis_adapter.core.navigation import APSystemState, NavMode
from efis_adapter.core.roles import SourceRole

RoleResult = Union[AirframeData, None, Exception, Callable[[SourceRole, Category], Optional[AirframeData]]]


class FakeGenerator:
    """Generator returning canned results per role and recording every call."""

    def __init__(self, results: Dict[SourceRole, RoleResult]) -> None:
        self.results = dict(results)
        self.calls: List[SourceRole] = []
        self._lock = threading.Lock()

    def read(self, role: SourceRole, category: Category) -> Optional[AirframeData]:
        with self._lock:
            self.calls.append(role)
        result = self.results.get(role)
        if isinstance(result, Exception):
            raise result
        if callable(result):
            return result(role, category)
        return result


class FakeAutopilot:
    def __init__(self, result: Union[APSystemState, None, Exception]) -> None:
        self.result = result
        self.calls = 0

    def read(self, category: Category) -> Optional[APSystemState]:
        self.calls += 1
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def make_record(
    category_id: str = "NAV1",
    *,
    heading: int = 0,
    air_speed: int = 0,
    vertical_speed: int = 0,
    role: Optional[SourceRole] = None,
) -> AirframeData:
    return AirframeData(
        category_id=category_id,
        heading=HeadingGroup(heading=heading, selected_course=45, course_deviation=120, glideslope_deviation=-50),
        vertical=VerticalGroup(vertical_speed=vertical_speed, selected_vertical_speed=500),
        velocity=VelocityGroup(air_speed=air_speed, ground_speed=2650, mach=380),
        timestamp=1_700_000_000.0,
        role=role,
    )


@pytest.fixture
def resolver() -> CategoryResolver:
    return CategoryResolver.from_mapping(
        {
            "NAV1": {"valid": True, "label": "Captain"},
            "NAV2": {"valid": True},
            "MAINT": {"valid": False},
        }
    )


@pytest.fixture
def nav1(resolver: CategoryResolver) -> Category:
    return resolver.resolve("NAV1")


@pytest.fixture
def lnav_state() -> APSystemState:
    return APSystemState(category_id="NAV1", nav_mode=NavMode.LNAV, engaged=True, vertical_guidance=-35)
