"""FastAPI application exposing the instrument readouts."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, List

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..core.errors import UnknownCategory
from ..core.service import InstrumentService, Readout
from .models import (
    CategoryRequest,
    InfoResponse,
    ReadoutResponse,
    RejectionDetail,
    SensorKeyRequest,
)


def _service(request: Request) -> InstrumentService:
    return request.app.state.service


async def _category_readout(
    readout: Callable[[str], Awaitable[Readout]], category_id: str
) -> ReadoutResponse:
    try:
        result = await readout(category_id)
    except UnknownCategory as exc:
        # configured category ids are not echoed over HTTP
        detail = RejectionDetail(category_id=exc.category_id)
        raise HTTPException(status_code=404, detail=detail.model_dump())
    return ReadoutResponse(**result.to_dict())


def create_app(service: InstrumentService, *, allow_origins: List[str] | None = None) -> FastAPI:
    """Build the HTTP surface around an already wired *service*."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        service.close()

    app = FastAPI(title="EFIS Adapter", version=__version__, lifespan=lifespan)
    app.state.service = service
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins or ["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.get("/v1/info", response_model=InfoResponse)
    def get_info(request: Request) -> InfoResponse:
        svc = _service(request)
        return InfoResponse(
            version=__version__,
            roles=[role.value for role in svc.roles],
            stalled_roles=[role.value for role in svc.stalled_roles],
            categories=svc.categories.available(),
        )

    @app.post("/v1/readout/hsi", response_model=ReadoutResponse)
    async def hsi_readout(req: CategoryRequest, request: Request) -> ReadoutResponse:
        return await _category_readout(_service(request).hsi_readout, req.category_id)

    @app.post("/v1/readout/vsi", response_model=ReadoutResponse)
    async def vsi_readout(req: CategoryRequest, request: Request) -> ReadoutResponse:
        return await _category_readout(_service(request).vsi_readout, req.category_id)

    @app.post("/v1/readout/speed", response_model=ReadoutResponse)
    async def speed_readout(req: CategoryRequest, request: Request) -> ReadoutResponse:
        return await _category_readout(_service(request).speed_readout, req.category_id)

    @app.post("/v1/readout/nav-mode", response_model=ReadoutResponse)
    async def nav_mode_readout(req: CategoryRequest, request: Request) -> ReadoutResponse:
        return await _category_readout(_service(request).nav_mode_readout, req.category_id)

    @app.post("/v1/readout/inclinometer", response_model=ReadoutResponse)
    async def inclinometer_readout(req: SensorKeyRequest, request: Request) -> ReadoutResponse:
        result = await _service(request).inclinometer_readout(req.sensor_key)
        return ReadoutResponse(**result.to_dict())

    return app
