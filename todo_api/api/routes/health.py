from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Health check endpoint.

    Used by load balancers and monitoring systems; exempt from throttling
    by default.

    Returns:
        dict: A dictionary with a single "status" key set to "ok".
    """

    return {"status": "ok"}


@router.get("/")
def root() -> dict:
    """Banner confirming the API is up."""

    return {"message": "Task list API is running"}
