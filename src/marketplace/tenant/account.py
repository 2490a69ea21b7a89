"""User account linked to a tenant. Role and verification gate tenant access."""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Identifier, String

from marketplace.domain import marketplace


class Role(Enum):
    USER = "user"
    TENANT = "tenant"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


ADMIN_ROLES = {Role.ADMIN.value, Role.SUPERADMIN.value}


@marketplace.aggregate
class Account:
    name = String(required=True, max_length=100)
    email = String(required=True, max_length=255, unique=True)
    phone = String(max_length=20)
    role = String(choices=Role, default=Role.USER.value)
    is_verified = Boolean(default=False)
    tenant_id = Identifier()
    created_at = DateTime()

    @classmethod
    def register(cls, name, email, phone=None, role=Role.USER.value):
        return cls(
            name=name,
            email=email.strip().lower(),
            phone=phone,
            role=role,
            created_at=datetime.now(UTC),
        )

    def link_tenant(self, tenant_id):
        self.tenant_id = tenant_id

    def grant_tenant_access(self):
        self.role = Role.TENANT.value
        self.is_verified = True

    def revoke_tenant_access(self):
        self.role = Role.USER.value
        self.is_verified = False
