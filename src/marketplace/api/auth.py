"""Caller identity for API routes.

Bearer tokens are verified at the gateway, which forwards the resolved
identity as headers. Routes only read those headers and apply role checks.
"""

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException

from marketplace.tenant.account import ADMIN_ROLES, Role


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: str = Role.USER.value
    tenant_id: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def is_superadmin(self) -> bool:
        return self.role == Role.SUPERADMIN.value


def current_principal(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
    x_tenant_id: str | None = Header(default=None),
) -> Principal:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authorized, no token")

    role = (x_user_role or Role.USER.value).lower()
    if role not in {r.value for r in Role}:
        raise HTTPException(status_code=401, detail="Not authorized, token failed")

    return Principal(user_id=x_user_id, role=role, tenant_id=x_tenant_id or None)


def require_admin(principal: Principal = Depends(current_principal)) -> Principal:
    if not principal.is_admin:
        raise HTTPException(status_code=403, detail="Access denied. Admin only.")
    return principal


def require_superadmin(principal: Principal = Depends(current_principal)) -> Principal:
    if not principal.is_superadmin:
        raise HTTPException(status_code=403, detail="Access denied. Super admin only.")
    return principal


def require_tenant(principal: Principal = Depends(current_principal)) -> Principal:
    if not principal.tenant_id:
        raise HTTPException(status_code=403, detail="You are not a registered tenant")
    return principal


def require_tenant_or_admin(principal: Principal = Depends(current_principal)) -> Principal:
    if not principal.tenant_id and not principal.is_admin:
        raise HTTPException(status_code=403, detail="Access denied")
    return principal
