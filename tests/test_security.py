"""
Tests for session authorization
Tests: role predicates and the permission matrix
"""

import pytest

from immogest.core.security import SessionContext
from immogest.models.enums import UserRole

LANDLORD = SessionContext("owner-1", UserRole.LANDLORD)
TENANT = SessionContext("tenant-1", UserRole.TENANT)
ANONYMOUS = SessionContext()


class TestPredicates:
    """Role and ownership checks"""

    def test_anonymous_is_never_authorized(self):
        assert ANONYMOUS.is_authenticated is False
        assert ANONYMOUS.is_authorized() is False
        assert ANONYMOUS.validate_permissions("read", "unit") is False

    def test_is_authorized_by_role_and_owner(self):
        assert LANDLORD.is_authorized(UserRole.LANDLORD) is True
        assert TENANT.is_authorized(UserRole.LANDLORD) is False
        assert LANDLORD.is_authorized(resource_owner_id="owner-2") is False

    def test_tenant_data_access(self):
        assert TENANT.can_access_tenant_data("tenant-1") is True
        assert TENANT.can_access_tenant_data("tenant-2") is False
        assert LANDLORD.can_access_tenant_data("tenant-2") is True

    def test_role_flags(self):
        assert LANDLORD.is_landlord and not LANDLORD.is_tenant
        assert TENANT.is_tenant and not TENANT.is_landlord
        assert not ANONYMOUS.is_tenant


class TestPermissionMatrix:
    """CRUD permissions per resource"""

    @pytest.mark.parametrize(
        "operation, resource, data, expected",
        [
            ("read", "property", None, False),
            ("read", "unit", None, True),
            ("update", "unit", None, False),
            ("read", "tenant", {"id": "tenant-1"}, True),
            ("read", "tenant", {"id": "tenant-2"}, False),
            ("create", "maintenance", None, True),
            ("delete", "maintenance", None, False),
            ("read", "transaction", None, True),
            ("create", "transaction", None, False),
            ("read", "invoice", None, False),
        ],
    )
    def test_tenant_permissions(self, operation, resource, data, expected):
        assert TENANT.validate_permissions(operation, resource, data) is expected

    @pytest.mark.parametrize("resource", ["property", "unit", "tenant", "maintenance", "transaction"])
    def test_landlord_manages_everything(self, resource):
        assert LANDLORD.validate_permissions("delete", resource) is True

