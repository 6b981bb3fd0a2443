from __future__ import annotations

import asyncio
import threading

import pytest

from efis_adapter.core.config import load_config
from efis_adapter.core.errors import CategoryDisabled, SourceReadError, UnknownCategory
from efis_adapter.core.inclinometer import InclinometerSample
from efis_adapter.core.navigation import NavigationModeResolver
from efis_adapter.core.roles import SourceRole
from efis_adapter.core.sanitize import MarkupSanitizer
from efis_adapter.core.service import InstrumentService, ReadoutStatus, build_service
from efis_adapter.core.sources import RedundantSourceReader
from efis_adapter.core.views import HSIView, VelocityView
from efis_adapter.io.generators import SimulatedAutopilot, SimulatedGenerator

from conftest import FakeAutopilot, FakeGenerator, make_record

CENTRAL = SourceRole.CENTRAL
COPILOT = SourceRole.COPILOT


class FakeInclinometer:
    def __init__(self, samples=None, error=None):
        self.samples = samples or []
        self.error = error

    def read(self):
        if self.error:
            raise self.error
        return self.samples


def make_service(resolver, generator, autopilot=None, inclinometer=None, **kwargs) -> InstrumentService:
    return InstrumentService(
        resolver,
        RedundantSourceReader(generator),
        NavigationModeResolver(autopilot or FakeAutopilot(None)),
        MarkupSanitizer(),
        inclinometer=inclinometer,
        **kwargs,
    )


def test_speed_readout_from_central(resolver):
    generator = FakeGenerator({CENTRAL: make_record(air_speed=250), COPILOT: make_record(air_speed=1)})
    readout = asyncio.run(make_service(resolver, generator).speed_readout("NAV1"))
    assert readout.available
    assert readout.category_id == "NAV1"
    assert readout.role is CENTRAL
    assert isinstance(readout.view, VelocityView)
    assert readout.view.air_speed == 25.0
    assert generator.calls == [CENTRAL]


def test_hsi_readout_falls_back_to_copilot(resolver):
    generator = FakeGenerator({CENTRAL: None, COPILOT: make_record(heading=90)})
    readout = asyncio.run(make_service(resolver, generator).hsi_readout("NAV1"))
    assert readout.status is ReadoutStatus.OK
    assert isinstance(readout.view, HSIView)
    assert readout.view.heading == 90.0
    assert readout.view.role is COPILOT
    assert readout.role is COPILOT


def test_unknown_category_rejected_with_sanitized_identifier(resolver):
    generator = FakeGenerator({CENTRAL: make_record()})
    service = make_service(resolver, generator)
    with pytest.raises(UnknownCategory) as excinfo:
        asyncio.run(service.hsi_readout("<img src=x>"))
    assert excinfo.value.category_id == ""
    assert "<img" not in str(excinfo.value)
    assert generator.calls == []


def test_disabled_category_rejected(resolver):
    generator = FakeGenerator({CENTRAL: make_record()})
    with pytest.raises(CategoryDisabled):
        asyncio.run(make_service(resolver, generator).vsi_readout("MAINT"))
    assert generator.calls == []


def test_no_data_readout_has_no_view(resolver):
    generator = FakeGenerator({CENTRAL: None, COPILOT: None})
    readout = asyncio.run(make_service(resolver, generator).vsi_readout("NAV2"))
    assert readout.status is ReadoutStatus.NO_DATA
    assert readout.view is None
    assert not readout.available


def test_all_sources_failed_is_degraded_not_raised(resolver):
    generator = FakeGenerator({CENTRAL: SourceReadError("a"), COPILOT: SourceReadError("b")})
    readout = asyncio.run(make_service(resolver, generator).speed_readout("NAV1"))
    assert readout.status is ReadoutStatus.SOURCES_FAILED
    assert readout.view is None
    assert "central" in readout.reason


def test_nav_mode_readout(resolver, lnav_state):
    generator = FakeGenerator({})
    autopilot = FakeAutopilot(lnav_state)
    readout = asyncio.run(make_service(resolver, generator, autopilot).nav_mode_readout("NAV1"))
    assert readout.available
    assert readout.view.nav_mode == 4.0
    assert readout.view.vertical_guidance == pytest.approx(-0.35)
    # navigation path never touches airframe generators
    assert generator.calls == []


def test_nav_mode_unavailable(resolver):
    readout = asyncio.run(make_service(resolver, FakeGenerator({})).nav_mode_readout("NAV1"))
    assert readout.status is ReadoutStatus.NAV_UNAVAILABLE
    assert readout.view is None


def test_inclinometer_readout(resolver):
    inclinometer = FakeInclinometer([InclinometerSample("left", 12), InclinometerSample("right", 3)])
    service = make_service(resolver, FakeGenerator({}), inclinometer=inclinometer)
    readout = asyncio.run(service.inclinometer_readout("left"))
    assert readout.available
    assert [view.slip_deg for view in readout.view] == [1.2]

    missing = asyncio.run(service.inclinometer_readout("<b>centre</b>"))
    assert missing.status is ReadoutStatus.NO_DATA
    assert missing.category_id == "centre"


def test_inclinometer_failure_and_missing_source(resolver):
    failing = make_service(resolver, FakeGenerator({}), inclinometer=FakeInclinometer(error=SourceReadError("x")))
    assert asyncio.run(failing.inclinometer_readout("left")).status is ReadoutStatus.SOURCES_FAILED
    bare = make_service(resolver, FakeGenerator({}))
    assert asyncio.run(bare.inclinometer_readout("left")).status is ReadoutStatus.NO_DATA


def test_readout_to_dict(resolver):
    generator = FakeGenerator({CENTRAL: make_record(air_speed=250)})
    payload = asyncio.run(make_service(resolver, generator).speed_readout("NAV1")).to_dict()
    assert payload["status"] == "ok"
    assert payload["available"] is True
    assert payload["role"] == "central"
    assert payload["view"]["air_speed"] == 25.0
    assert payload["view"]["role"] == "central"


def test_concurrent_requests_are_independent():
    service = build_service(
        load_config(),
        SimulatedGenerator(offline=[CENTRAL]),
        SimulatedAutopilot(),
    )

    async def scenario():
        return await asyncio.gather(
            service.hsi_readout("NAV1"),
            service.vsi_readout("NAV2"),
            service.speed_readout("SIM"),
            service.nav_mode_readout("NAV1"),
        )

    readouts = asyncio.run(scenario())
    assert all(readout.available for readout in readouts)
    assert [readout.role for readout in readouts[:3]] == [COPILOT, COPILOT, COPILOT]
    assert service.roles == (CENTRAL, COPILOT)


def test_slow_inclinometer_times_out(resolver):
    release = threading.Event()

    class SlowInclinometer:
        def read(self):
            release.wait(5.0)
            return [InclinometerSample("left", 12)]

    service = make_service(
        resolver, FakeGenerator({}), inclinometer=SlowInclinometer(), inclinometer_timeout=0.05
    )
    try:
        readout = asyncio.run(service.inclinometer_readout("left"))
    finally:
        release.set()
        service.close()
    assert readout.status is ReadoutStatus.SOURCES_FAILED
    assert readout.reason == "timeout"
    assert readout.view is None
