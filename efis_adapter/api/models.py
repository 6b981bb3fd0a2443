"""Pydantic models for FastAPI endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class CategoryRequest(BaseModel):
    category_id: str = Field(..., max_length=256)
    symbol_generator_id: Optional[int] = None


class SensorKeyRequest(BaseModel):
    sensor_key: str = Field(..., max_length=256)


class ReadoutResponse(BaseModel):
    instrument: str
    category_id: str
    status: str
    available: bool
    role: Optional[str] = None
    reason: Optional[str] = None
    view: Union[Dict[str, Any], List[Dict[str, Any]], None] = None


class RejectionDetail(BaseModel):
    error: str = "unknown_category"
    category_id: str


class InfoResponse(BaseModel):
    version: str
    roles: List[str]
    stalled_roles: List[str] = Field(default_factory=list)
    categories: List[str]
