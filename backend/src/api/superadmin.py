# pyright: reportMissingTypeStubs=false
"""
Superadmin API endpoints.

Platform-wide center provisioning. Superadmins are not scoped to a center.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from api.responses import CamelModel, CenterResponse
from auth.dependencies import ActorContext, require_superadmin
from core.database import get_db
from services import CenterService

logger = logging.getLogger(__name__)

router = APIRouter()


class CenterCreateRequest(CamelModel):
    """Request model for provisioning a center for an existing admin."""
    admin_id: int
    name: str
    name_en: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None


class CenterListResponse(CamelModel):
    success: bool = True
    count: int
    centers: List[CenterResponse]


class CenterEnvelope(CamelModel):
    success: bool = True
    center: CenterResponse


@router.get("/centers", summary="List all centers")
async def list_centers(
    _ctx: ActorContext = Depends(require_superadmin),
    db: Session = Depends(get_db)
) -> CenterListResponse:
    centers = CenterService.list_centers(db)
    return CenterListResponse(
        count=len(centers),
        centers=[CenterResponse.model_validate(c) for c in centers],
    )


@router.post("/centers", summary="Provision a center", status_code=status.HTTP_201_CREATED)
async def create_center(
    request: CenterCreateRequest,
    ctx: ActorContext = Depends(require_superadmin),
    db: Session = Depends(get_db)
) -> CenterEnvelope:
    """
    Create a center and bind the given admin to it.

    The admin must exist, hold the ``admin`` role and not yet administer a
    center.
    """
    center = CenterService.provision_center(db, request.admin_id, request.model_dump(exclude={"admin_id"}))
    logger.info(f"Superadmin {ctx.actor_id} provisioned center {center.id}")
    return CenterEnvelope(center=CenterResponse.model_validate(center))
