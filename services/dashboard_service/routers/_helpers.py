"""Shared router helpers."""

from typing import Any

from fastapi import HTTPException

from services.dashboard_service.services.results import ActionResult


def unwrap(result: ActionResult) -> dict[str, Any]:
    """Return the response body for a successful result or raise the mapped HTTP error."""
    if not result.success:
        raise HTTPException(status_code=result.status_code, detail=result.error)
    return result.to_dict()


def changes_of(payload) -> dict[str, Any]:
    """Fields the client actually sent in a partial update."""
    return payload.model_dump(exclude_unset=True)
