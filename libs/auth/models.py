from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AuthUser(BaseModel):
    """
    Represents an authenticated principal decoded from a bearer token.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    role: str = "authenticated"
