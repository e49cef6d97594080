"""Base class for documents read from and written to the document store."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from libs.common.datetime_utils import ensure_aware
from libs.db.documents import Document


class DocumentModel(BaseModel):
    """
    Typed view over a stored document.

    Unknown fields are kept so documents written by other tools round-trip
    untouched. Enum fields are stored as their string values.
    """

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
    )

    id: Optional[str] = None

    @field_validator("*", mode="after")
    @classmethod
    def _aware_datetimes(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return ensure_aware(value)
        return value

    @classmethod
    def from_document(cls, doc: Document):
        return cls.model_validate({**doc.data, "id": doc.id})

    def to_document(self) -> dict[str, Any]:
        """Fields to persist; the id lives in the document path."""
        return self.model_dump(exclude={"id"}, exclude_none=True)
