from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from libs.auth.permissions import Role


class StoreUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    description: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class PermissionsResponse(BaseModel):
    role: Optional[Role] = None
    is_owner: bool = False
    is_editor: bool = False
    is_viewer: bool = False
    permissions: list[str] = Field(default_factory=list)


class InvitationCreate(BaseModel):
    email: EmailStr
    # Validated by the service so "owner" gets its own error message
    role: str
    team_name: Optional[str] = None
    inviter_name: Optional[str] = None


class InvitationCreateResponse(BaseModel):
    success: bool = True
    invitation_id: str
    email_sent: bool


class RoleUpdate(BaseModel):
    role: str


class UserStoresResponse(BaseModel):
    store_ids: list[str]
