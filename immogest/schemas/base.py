"""Base schema utilities."""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    def changes(self) -> dict:
        """Fields explicitly set by the caller, for partial updates."""
        return self.model_dump(exclude_unset=True)
