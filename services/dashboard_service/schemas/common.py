from typing import Any, Optional

from pydantic import BaseModel


class ActionResponse(BaseModel):
    """Envelope returned by every mutating dashboard endpoint."""

    success: bool
    id: Optional[str] = None
    message: Optional[str] = None
    data: Any = None


class DataResponse(BaseModel):
    success: bool = True
    data: Any = None
