# moodjournal/app/routes_health.py

from __future__ import annotations
from fastapi import APIRouter

router = APIRouter()

@router.get("/health")
async def health():
    """서버가 살아있는지만 확인할 때 사용."""
    return {
        "status": "ok",
        "service": "moodjournal",
    }
