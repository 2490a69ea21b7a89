"""Application tests for tenant onboarding commands."""

import json

import pytest
from marketplace.errors import TenantNotFound
from marketplace.tenant.account import Account
from marketplace.tenant.management import (
    ApplyAsTenant,
    ApproveTenant,
    ReactivateTenant,
    RejectTenant,
    SuspendTenant,
    UpdateCommissionRate,
    load_tenant,
)
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain


def _apply(**overrides):
    defaults = {
        "business_name": "Crafts Co",
        "owner_name": "Meera Nair",
        "email": "meera@crafts.example",
        "phone": "9000000000",
    }
    defaults.update(overrides)
    return current_domain.process(ApplyAsTenant(**defaults), asynchronous=False)


def _account(tenant_id):
    return current_domain.repository_for(Account).get(load_tenant(tenant_id).user_id)


class TestApply:
    def test_application_creates_pending_tenant_and_account(self):
        tenant_id = _apply(address=json.dumps({"city": "Jaipur", "pincode": "302001"}))

        tenant = load_tenant(tenant_id)
        assert tenant.status == "pending"
        assert tenant.address.city == "Jaipur"
        account = _account(tenant_id)
        assert account.role == "user"
        assert str(account.tenant_id) == tenant_id

    def test_duplicate_email_is_rejected(self):
        _apply()
        with pytest.raises(ValidationError) as exc:
            _apply(email="MEERA@crafts.example")
        assert "email" in exc.value.messages


class TestLifecycle:
    def test_approval_grants_tenant_role(self):
        tenant_id = _apply()
        current_domain.process(ApproveTenant(tenant_id=tenant_id), asynchronous=False)

        assert load_tenant(tenant_id).is_approved
        assert _account(tenant_id).role == "tenant"

    def test_suspension_revokes_and_reactivation_restores(self):
        tenant_id = _apply()
        current_domain.process(ApproveTenant(tenant_id=tenant_id), asynchronous=False)

        current_domain.process(SuspendTenant(tenant_id=tenant_id, reason="Late shipments"), asynchronous=False)
        assert load_tenant(tenant_id).status == "suspended"
        assert _account(tenant_id).role == "user"

        current_domain.process(ReactivateTenant(tenant_id=tenant_id), asynchronous=False)
        assert load_tenant(tenant_id).status == "approved"
        assert _account(tenant_id).role == "tenant"

    def test_reject(self):
        tenant_id = _apply()
        current_domain.process(RejectTenant(tenant_id=tenant_id, reason="Incomplete KYC"), asynchronous=False)
        assert load_tenant(tenant_id).status == "rejected"

    def test_unknown_tenant(self):
        with pytest.raises(TenantNotFound) as exc:
            current_domain.process(ApproveTenant(tenant_id="missing"), asynchronous=False)
        assert exc.value.message == "Tenant not found"


class TestCommissionRate:
    def test_update(self):
        tenant_id = _apply()
        current_domain.process(UpdateCommissionRate(tenant_id=tenant_id, commission_rate=7.5), asynchronous=False)
        assert load_tenant(tenant_id).commission_rate == 7.5

    def test_out_of_range(self):
        tenant_id = _apply()
        with pytest.raises(ValidationError):
            current_domain.process(UpdateCommissionRate(tenant_id=tenant_id, commission_rate=150.0), asynchronous=False)
