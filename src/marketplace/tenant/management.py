"""Tenant onboarding and lifecycle: commands and handler.

Every status change also moves the linked account's role, so a suspended
tenant loses tenant access immediately.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import TenantNotFound
from marketplace.tenant.account import Account
from marketplace.tenant.tenant import BusinessAddress, Tenant

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Tenant")
class ApplyAsTenant:
    business_name = String(required=True, max_length=200)
    owner_name = String(required=True, max_length=100)
    email = String(required=True, max_length=255)
    phone = String(required=True, max_length=20)
    address = Text()  # JSON: {street, city, state, pincode}
    gst_number = String(max_length=20)
    pan_number = String(max_length=20)


@marketplace.command(part_of="Tenant")
class ApproveTenant:
    tenant_id = Identifier(required=True)


@marketplace.command(part_of="Tenant")
class RejectTenant:
    tenant_id = Identifier(required=True)
    reason = String(max_length=500)


@marketplace.command(part_of="Tenant")
class SuspendTenant:
    tenant_id = Identifier(required=True)
    reason = String(max_length=500)


@marketplace.command(part_of="Tenant")
class ReactivateTenant:
    tenant_id = Identifier(required=True)


@marketplace.command(part_of="Tenant")
class UpdateCommissionRate:
    tenant_id = Identifier(required=True)
    commission_rate = Float(required=True)


def load_tenant(tenant_id):
    try:
        return current_domain.repository_for(Tenant).get(tenant_id)
    except ObjectNotFoundError:
        raise TenantNotFound("Tenant not found", tenant_id=str(tenant_id)) from None


def _linked_account(tenant):
    if not tenant.user_id:
        return None
    try:
        return current_domain.repository_for(Account).get(tenant.user_id)
    except ObjectNotFoundError:
        logger.warning("tenant_account_missing", tenant_id=str(tenant.id), user_id=str(tenant.user_id))
        return None


@marketplace.command_handler(part_of=Tenant)
class TenantCommandHandler:
    @handle(ApplyAsTenant)
    def apply(self, command):
        email = command.email.strip().lower()
        tenant_repo = current_domain.repository_for(Tenant)
        account_repo = current_domain.repository_for(Account)

        if tenant_repo._dao.query.filter(email=email).all().items:
            raise ValidationError({"email": ["A tenant application with this email already exists"]})
        if account_repo._dao.query.filter(email=email).all().items:
            raise ValidationError({"email": ["An account with this email already exists"]})

        account = Account.register(name=command.owner_name, email=email, phone=command.phone)
        address = json.loads(command.address) if command.address else None
        tenant = Tenant.apply(
            business_name=command.business_name,
            owner_name=command.owner_name,
            email=email,
            phone=command.phone,
            user_id=str(account.id),
            address=BusinessAddress(**address) if address else None,
            gst_number=command.gst_number,
            pan_number=command.pan_number,
        )
        account.link_tenant(str(tenant.id))

        account_repo.add(account)
        tenant_repo.add(tenant)
        logger.info("tenant_applied", tenant_id=str(tenant.id), business_name=tenant.business_name)
        return str(tenant.id)

    @handle(ApproveTenant)
    def approve(self, command):
        tenant = load_tenant(command.tenant_id)
        tenant.approve()
        account = _linked_account(tenant)
        if account:
            account.grant_tenant_access()
            current_domain.repository_for(Account).add(account)
        current_domain.repository_for(Tenant).add(tenant)
        logger.info("tenant_approved", tenant_id=str(tenant.id))

    @handle(RejectTenant)
    def reject(self, command):
        tenant = load_tenant(command.tenant_id)
        tenant.reject()
        current_domain.repository_for(Tenant).add(tenant)
        logger.info("tenant_rejected", tenant_id=str(tenant.id), reason=command.reason)

    @handle(SuspendTenant)
    def suspend(self, command):
        tenant = load_tenant(command.tenant_id)
        tenant.suspend()
        account = _linked_account(tenant)
        if account:
            account.revoke_tenant_access()
            current_domain.repository_for(Account).add(account)
        current_domain.repository_for(Tenant).add(tenant)
        logger.info("tenant_suspended", tenant_id=str(tenant.id), reason=command.reason)

    @handle(ReactivateTenant)
    def reactivate(self, command):
        tenant = load_tenant(command.tenant_id)
        tenant.reactivate()
        account = _linked_account(tenant)
        if account:
            account.grant_tenant_access()
            current_domain.repository_for(Account).add(account)
        current_domain.repository_for(Tenant).add(tenant)
        logger.info("tenant_reactivated", tenant_id=str(tenant.id))

    @handle(UpdateCommissionRate)
    def update_commission_rate(self, command):
        tenant = load_tenant(command.tenant_id)
        tenant.update_commission_rate(command.commission_rate)
        current_domain.repository_for(Tenant).add(tenant)
        logger.info("tenant_commission_updated", tenant_id=str(tenant.id), commission_rate=tenant.commission_rate)
