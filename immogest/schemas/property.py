"""Property and Unit schemas."""

from typing import Optional

from pydantic import Field, field_validator

from immogest.schemas.base import BaseSchema
from immogest.models.enums import PropertyType, UnitStatus


class PropertyCreate(BaseSchema):
    """Create a new property."""

    name: str = Field(..., min_length=2, max_length=255)
    address: str = Field(..., min_length=5, max_length=500)
    property_type: PropertyType = PropertyType.RESIDENTIAL
    total_units: int = Field(default=0, ge=0)
    year_built: Optional[int] = Field(None, ge=1800, le=2100)
    square_footage: Optional[float] = Field(None, gt=0)
    description: Optional[str] = None
    owner_id: Optional[str] = None


class PropertyUpdate(BaseSchema):
    """Update property."""

    name: Optional[str] = Field(None, min_length=2, max_length=255)
    address: Optional[str] = Field(None, min_length=5, max_length=500)
    property_type: Optional[PropertyType] = None
    total_units: Optional[int] = Field(None, ge=0)
    year_built: Optional[int] = Field(None, ge=1800, le=2100)
    square_footage: Optional[float] = Field(None, gt=0)
    description: Optional[str] = None


class UnitCreate(BaseSchema):
    """Create a new unit."""

    property_id: str
    unit_number: str = Field(..., min_length=1, max_length=50)
    floor: Optional[str] = None
    unit_type: Optional[str] = None
    surface: Optional[float] = Field(None, gt=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    rent: float = Field(default=0, ge=0)
    deposit: float = Field(default=0, ge=0)
    description: Optional[str] = None
    amenities: list[str] = Field(default_factory=list)
    furnished: bool = False
    status: UnitStatus = UnitStatus.AVAILABLE

    @field_validator("status")
    @classmethod
    def validate_initial_status(cls, v: UnitStatus) -> UnitStatus:
        """A new unit has no tenant, so it cannot start out occupied."""
        if v == UnitStatus.OCCUPIED:
            raise ValueError("a new unit can only be available or under maintenance")
        return v


class UnitUpdate(BaseSchema):
    """Update unit."""

    unit_number: Optional[str] = Field(None, min_length=1, max_length=50)
    floor: Optional[str] = None
    unit_type: Optional[str] = None
    surface: Optional[float] = Field(None, gt=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    rent: Optional[float] = Field(None, ge=0)
    deposit: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    amenities: Optional[list[str]] = None
    furnished: Optional[bool] = None
    status: Optional[UnitStatus] = None


class UnitStatusUpdate(BaseSchema):
    """Set a unit's status directly."""

    status: UnitStatus
