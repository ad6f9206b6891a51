"""Liveness endpoint."""

from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
def health() -> dict[str, bool]:
    """Liveness check with no side effects."""
    return {"ok": True}
