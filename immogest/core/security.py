"""Session identity and role-based authorization."""

from typing import Any, Literal, Optional

from fastapi import Depends, Header, HTTPException, status

from immogest.models.enums import UserRole

Operation = Literal["create", "read", "update", "delete"]


class SessionContext:
    """Identity of the caller for one request.

    Token verification is out of scope: the identity comes from the
    ``X-User-Id`` and ``X-User-Role`` headers set by the fronting gateway.
    """

    def __init__(self, user_id: Optional[str] = None, role: Optional[UserRole] = None):
        self.user_id = user_id
        self.role = role

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id) and self.role is not None

    @property
    def is_landlord(self) -> bool:
        return self.is_authorized(UserRole.LANDLORD)

    @property
    def is_tenant(self) -> bool:
        return self.is_authorized(UserRole.TENANT)

    def is_authorized(
        self,
        required_role: Optional[UserRole] = None,
        resource_owner_id: Optional[str] = None,
    ) -> bool:
        if not self.is_authenticated:
            return False
        if required_role and self.role != required_role:
            return False
        if resource_owner_id and self.user_id != resource_owner_id:
            return False
        return True

    def can_access_tenant_data(self, tenant_id: str) -> bool:
        """Tenants see their own record; landlords see all of theirs."""
        if not self.is_authenticated:
            return False
        if self.is_tenant:
            return self.is_authorized(UserRole.TENANT, resource_owner_id=tenant_id)
        return self.is_landlord

    def validate_permissions(
        self,
        operation: Operation,
        resource: str,
        data: Optional[dict[str, Any]] = None,
    ) -> bool:
        """CRUD permission matrix per resource type."""
        if not self.is_authenticated:
            return False

        if resource == "property":
            return self.is_landlord
        if resource == "transaction":
            # tenant reads are narrowed to their own payments by the router
            return operation == "read" or self.is_landlord
        if resource == "unit":
            return operation == "read" or self.is_landlord
        if resource == "tenant":
            if operation == "read" and self.is_tenant:
                return (data or {}).get("id") == self.user_id
            return self.is_landlord
        if resource == "maintenance":
            return operation in ("create", "read") or self.is_landlord
        return False


async def get_session(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> SessionContext:
    """Build the session from request headers."""
    role = None
    if x_user_role:
        try:
            role = UserRole(x_user_role.lower())
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown role '{x_user_role}'",
            )
    return SessionContext(user_id=x_user_id, role=role)


def require_session(session: SessionContext = Depends(get_session)) -> SessionContext:
    """Require an identified caller."""
    if not session.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return session


def require_landlord(session: SessionContext = Depends(require_session)) -> SessionContext:
    """Require the landlord role."""
    if not session.is_landlord:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Landlord privileges required",
        )
    return session


def require_permission(operation: Operation, resource: str):
    """Dependency factory checking ``validate_permissions`` for a resource."""

    def dependency(session: SessionContext = Depends(require_session)) -> SessionContext:
        if not session.validate_permissions(operation, resource):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Not allowed to {operation} {resource}",
            )
        return session

    return dependency
