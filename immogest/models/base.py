"""Base record type shared by every table row."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class Record(BaseModel):
    """A row as stored in the hosted backend or the fallback store.

    Unknown columns (joined relations, backend-added fields) are ignored.
    """

    model_config = ConfigDict(
        from_attributes=True,
        extra="ignore",
    )

    id: str
    created_at: datetime
    updated_at: datetime
