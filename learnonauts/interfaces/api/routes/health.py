"""
Health Routes - System health and status endpoints.
"""

from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "learnonauts"}


@router.get("/")
async def banner() -> dict[str, str]:
    return {"message": "Learnonauts Server API is running!"}
