"""Tenant aggregate: a marketplace seller profile.

Lifecycle:
    pending → approved | rejected
    rejected → approved
    approved → suspended → approved (reactivation)

Only approved tenants may receive orders.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, String, ValueObject

from marketplace.domain import marketplace


class TenantStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


_VALID_TRANSITIONS = {
    TenantStatus.PENDING: {TenantStatus.APPROVED, TenantStatus.REJECTED},
    TenantStatus.REJECTED: {TenantStatus.APPROVED},
    TenantStatus.APPROVED: {TenantStatus.SUSPENDED},
    TenantStatus.SUSPENDED: {TenantStatus.APPROVED},
}


@marketplace.value_object(part_of="Tenant")
class BusinessAddress:
    street = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    pincode = String(max_length=10)


@marketplace.aggregate
class Tenant:
    business_name = String(required=True, max_length=200)
    owner_name = String(required=True, max_length=100)
    email = String(required=True, max_length=255, unique=True)
    phone = String(required=True, max_length=20)
    address = ValueObject(BusinessAddress)
    gst_number = String(max_length=20)
    pan_number = String(max_length=20)
    commission_rate = Float(default=10.0, min_value=0.0, max_value=100.0)
    status = String(choices=TenantStatus, default=TenantStatus.PENDING.value)
    user_id = Identifier()
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def apply(cls, business_name, owner_name, email, phone, user_id, **details):
        now = datetime.now(UTC)
        return cls(
            business_name=business_name,
            owner_name=owner_name,
            email=email.strip().lower(),
            phone=phone,
            user_id=user_id,
            status=TenantStatus.PENDING.value,
            created_at=now,
            updated_at=now,
            **details,
        )

    @property
    def is_approved(self) -> bool:
        return self.status == TenantStatus.APPROVED.value

    def _transition(self, target):
        current = TenantStatus(self.status)
        if target not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot move tenant from {current.value} to {target.value}"]})
        self.status = target.value
        self.updated_at = datetime.now(UTC)

    def approve(self):
        self._transition(TenantStatus.APPROVED)
        self.is_active = True

    def reject(self):
        self._transition(TenantStatus.REJECTED)

    def suspend(self):
        self._transition(TenantStatus.SUSPENDED)
        self.is_active = False

    def reactivate(self):
        if TenantStatus(self.status) != TenantStatus.SUSPENDED:
            raise ValidationError({"status": ["Only suspended tenants can be reactivated"]})
        self._transition(TenantStatus.APPROVED)
        self.is_active = True

    def update_commission_rate(self, rate):
        if rate is None or rate < 0 or rate > 100:
            raise ValidationError({"commission_rate": ["Commission rate must be between 0 and 100"]})
        self.commission_rate = rate
        self.updated_at = datetime.now(UTC)
