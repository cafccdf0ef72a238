"""Enumeration types for the ImmoGest domain model."""

from enum import Enum


class PropertyType(str, Enum):
    """Type of property."""
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    MIXED = "mixed"


class UnitStatus(str, Enum):
    """Status of a unit."""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class MaintenanceStatus(str, Enum):
    """Status of a maintenance request."""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"


class MaintenancePriority(str, Enum):
    """Urgency of a maintenance request."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class MaintenanceCategory(str, Enum):
    """Trade needed for a maintenance request."""
    GENERAL = "general"
    PLUMBING = "plumbing"
    ELECTRICAL = "electrical"
    HVAC = "hvac"
    APPLIANCE = "appliance"
    SECURITY = "security"
    OTHER = "other"


class TransactionType(str, Enum):
    """Direction of a financial transaction."""
    INCOME = "income"
    EXPENSE = "expense"


class UserRole(str, Enum):
    """Role of the session user."""
    LANDLORD = "landlord"
    TENANT = "tenant"
