"""Property and Unit records."""

from typing import Optional

from pydantic import Field

from immogest.models.base import Record
from immogest.models.enums import PropertyType, UnitStatus


class Property(Record):
    """A building or complex owned by a landlord."""

    name: str
    address: str
    property_type: PropertyType = PropertyType.RESIDENTIAL
    total_units: int = 0
    year_built: Optional[int] = None
    square_footage: Optional[float] = None
    description: Optional[str] = None
    owner_id: Optional[str] = None


class Unit(Record):
    """A rentable unit within a property."""

    property_id: str
    unit_number: str
    floor: Optional[str] = None
    unit_type: Optional[str] = None
    surface: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    rent: float = 0
    deposit: float = 0
    description: Optional[str] = None
    amenities: list[str] = Field(default_factory=list)
    furnished: bool = False
    status: UnitStatus = UnitStatus.AVAILABLE
