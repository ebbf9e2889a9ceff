"""Home and health endpoints."""

from fastapi import APIRouter

from taskboard.errors import build_envelope
from taskboard.utils.time import uptime_seconds

router = APIRouter()


@router.get("/")
async def home():
    """Liveness: process uptime in seconds."""
    return build_envelope("OK", {"uptime": uptime_seconds()})


@router.get("/health")
async def health():
    return build_envelope("OK", {"uptime": uptime_seconds()})
