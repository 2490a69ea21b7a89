"""FastAPI routes for tenant onboarding and lifecycle."""

import json

from fastapi import APIRouter, Depends, HTTPException
from protean.utils.globals import current_domain

from marketplace.api.auth import Principal, current_principal, require_admin, require_superadmin
from marketplace.api.schemas import (
    ApplyTenantRequest,
    CommissionRateRequest,
    StatusResponse,
    TenantIdResponse,
    TenantReasonRequest,
    TenantResponse,
    TenantStatsResponse,
)
from marketplace.order.queries import tenant_stats
from marketplace.tenant.management import (
    ApplyAsTenant,
    ApproveTenant,
    ReactivateTenant,
    RejectTenant,
    SuspendTenant,
    UpdateCommissionRate,
    load_tenant,
)

tenant_router = APIRouter(prefix="/tenants", tags=["tenants"])


@tenant_router.post("/apply", status_code=201, response_model=TenantIdResponse)
def apply_as_tenant(body: ApplyTenantRequest) -> TenantIdResponse:
    command = ApplyAsTenant(
        business_name=body.business_name,
        owner_name=body.owner_name,
        email=body.email,
        phone=body.phone,
        address=json.dumps(body.address.model_dump()) if body.address else None,
        gst_number=body.gst_number,
        pan_number=body.pan_number,
    )
    return TenantIdResponse(tenant_id=current_domain.process(command, asynchronous=False))


@tenant_router.get("/{tenant_id}", response_model=TenantResponse)
def get_tenant(tenant_id: str, principal: Principal = Depends(current_principal)) -> TenantResponse:
    if not principal.is_admin and principal.tenant_id != tenant_id:
        raise HTTPException(status_code=403, detail="Access denied")
    tenant = load_tenant(tenant_id)
    return TenantResponse(
        tenant_id=str(tenant.id),
        business_name=tenant.business_name,
        owner_name=tenant.owner_name,
        email=tenant.email,
        phone=tenant.phone,
        status=tenant.status,
        commission_rate=tenant.commission_rate,
        is_active=tenant.is_active,
        user_id=str(tenant.user_id) if tenant.user_id else None,
    )


@tenant_router.get("/{tenant_id}/stats", response_model=TenantStatsResponse)
def get_tenant_stats(tenant_id: str, principal: Principal = Depends(current_principal)) -> TenantStatsResponse:
    if not principal.is_admin and principal.tenant_id != tenant_id:
        raise HTTPException(status_code=403, detail="Access denied")
    return TenantStatsResponse(**tenant_stats(load_tenant(tenant_id)))


@tenant_router.put("/{tenant_id}/approve", response_model=StatusResponse)
def approve_tenant(tenant_id: str, principal: Principal = Depends(require_superadmin)) -> StatusResponse:
    current_domain.process(ApproveTenant(tenant_id=tenant_id), asynchronous=False)
    return StatusResponse(status="approved")


@tenant_router.put("/{tenant_id}/reject", response_model=StatusResponse)
def reject_tenant(
    tenant_id: str, body: TenantReasonRequest | None = None, principal: Principal = Depends(require_superadmin)
) -> StatusResponse:
    command = RejectTenant(tenant_id=tenant_id, reason=body.reason if body else None)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="rejected")


@tenant_router.put("/{tenant_id}/suspend", response_model=StatusResponse)
def suspend_tenant(
    tenant_id: str, body: TenantReasonRequest | None = None, principal: Principal = Depends(require_superadmin)
) -> StatusResponse:
    command = SuspendTenant(tenant_id=tenant_id, reason=body.reason if body else None)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="suspended")


@tenant_router.put("/{tenant_id}/reactivate", response_model=StatusResponse)
def reactivate_tenant(tenant_id: str, principal: Principal = Depends(require_superadmin)) -> StatusResponse:
    current_domain.process(ReactivateTenant(tenant_id=tenant_id), asynchronous=False)
    return StatusResponse(status="approved")


@tenant_router.put("/{tenant_id}/commission", response_model=StatusResponse)
def update_commission_rate(
    tenant_id: str, body: CommissionRateRequest, principal: Principal = Depends(require_admin)
) -> StatusResponse:
    command = UpdateCommissionRate(tenant_id=tenant_id, commission_rate=body.commission_rate)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()
