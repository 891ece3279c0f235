from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.features.audit.schemas.audit import AuditFilters, AuditRequest
from app.features.audit.services.audit_service import AuditService, get_audit_service
from app.platform.exceptions import AuditNotFoundError
from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger("audit_routes")
router = APIRouter(prefix="/audits", tags=["Audits"])


@router.post(
    "",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    summary="Audit a page",
    description="Load the page in a browser, score it and store the audit",
)
async def create_audit(
    request: AuditRequest,
    service: AuditService = Depends(get_audit_service),
):
    logger.info(f"Audit requested for {request.url}")
    outcome = await service.audit(request.url, request.options, request.user_id)

    return api_response(
        data={
            "audit_id": outcome.audit_id,
            "processing_time": outcome.processing_time,
            "audit": outcome.audit.model_dump(mode="json"),
        },
        message="Page audited successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.get(
    "",
    response_model=dict,
    summary="List audits",
    description="Audit summaries, newest first. `q` matches a URL substring.",
)
async def list_audits(
    q: Optional[str] = Query(None, description="Case-insensitive URL substring"),
    user_id: Optional[str] = Query(None),
    min_score: Optional[int] = Query(None, ge=0, le=100),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    service: AuditService = Depends(get_audit_service),
):
    filters = AuditFilters(
        url=q,
        user_id=user_id,
        min_score=min_score,
        date_from=date_from,
        date_to=date_to,
    )
    audits = await service.list_audits(filters)

    return api_response(
        data=[a.model_dump(mode="json") for a in audits],
        message=f"Found {len(audits)} audits",
    )


@router.get(
    "/{audit_id}",
    response_model=dict,
    summary="Get an audit",
)
async def get_audit(
    audit_id: str,
    service: AuditService = Depends(get_audit_service),
):
    audit = await service.require_audit(audit_id)
    return api_response(
        data=audit.model_dump(mode="json"),
        message="Audit retrieved successfully",
    )


@router.delete(
    "/{audit_id}",
    response_model=dict,
    summary="Delete an audit",
)
async def delete_audit(
    audit_id: str,
    service: AuditService = Depends(get_audit_service),
):
    deleted = await service.delete_audit(audit_id)
    if not deleted:
        raise AuditNotFoundError(audit_id)

    return api_response(
        data={"deleted": True},
        message="Audit deleted successfully",
    )
