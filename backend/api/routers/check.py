"""Configuration probe.

Routes
------
GET /check    → {"hasKey": bool, "model": str}
"""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from backend.config import settings

router = APIRouter()


class CheckResponse(BaseModel):
    hasKey: bool
    model: str


@router.get("/check", response_model=CheckResponse)
def check_endpoint() -> dict[str, object]:
    """Report whether the summariser is usable and which model it would call."""
    return {"hasKey": settings.has_llm_credentials, "model": settings.active_model}
