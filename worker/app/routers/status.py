# worker/app/routers/status.py
from __future__ import annotations

from fastapi import APIRouter

from worker.app.config import settings
from worker.app.telemetry import telemetry

router = APIRouter()


@router.get("/health")
def health():
    return {"ok": True}


@router.get("/status")
def status():
    """Static config plus in-memory counters. No results, no secrets."""
    return {
        "ok": True,
        "model": settings.OPENAI_MODEL,
        "max_upload_bytes": settings.MAX_UPLOAD_BYTES,
        "telemetry": telemetry.get_stats(),
    }
