# pyright: reportMissingTypeStubs=false
"""
Admin API endpoints for center management.

Every endpoint requires the ``admin`` role and a center whose admin
back-reference matches the caller (``require_center_admin``). Specialists,
parents and children are only reachable through that center.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from api.responses import (
    ActorResponse, ActorSummary, CamelModel, CenterResponse, ChildDetailResponse,
    ParentSummary, SpecialistSummary, SuccessResponse
)
from auth.dependencies import CenterAdminContext, require_center_admin, require_roles
from core.database import get_db
from core.errors import NotFoundError
from models import ActorRole, Child, Parent, Specialist
from services import CenterService, ChildService, LinkGraph

logger = logging.getLogger(__name__)

router = APIRouter()


# ===== Request / response models =====

class CenterUpdateRequest(CamelModel):
    name: Optional[str] = None
    name_en: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class SpecialistCreateRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    phone: Optional[str] = None
    specialization: Optional[str] = None
    license_number: Optional[str] = None


class SpecialistUpdateRequest(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    specialization: Optional[str] = None
    license_number: Optional[str] = None


class LinkParentRequest(CamelModel):
    parent_id: int


class LinkChildRequest(CamelModel):
    child_id: int


class CenterEnvelope(CamelModel):
    success: bool = True
    message: Optional[str] = None
    center: CenterResponse
    specialists: Optional[List[SpecialistSummary]] = None


class SpecialistListItem(SpecialistSummary):
    linked_parents: List[ActorSummary] = []


class SpecialistListResponse(CamelModel):
    success: bool = True
    count: int
    specialists: List[SpecialistListItem]


class SpecialistDetail(ActorResponse):
    linked_parents: List[ParentSummary] = []
    assigned_children: List[ChildDetailResponse] = []


class SpecialistEnvelope(CamelModel):
    success: bool = True
    message: Optional[str] = None
    specialist: ActorResponse


class SpecialistDetailEnvelope(CamelModel):
    success: bool = True
    specialist: SpecialistDetail


class ParentListResponse(CamelModel):
    success: bool = True
    count: int
    parents: List[ParentSummary]


class ChildListResponse(CamelModel):
    success: bool = True
    count: int
    children: List[ChildDetailResponse]


class StatsResponse(CamelModel):
    success: bool = True
    stats: dict[str, int]
    recent_specialists: List[SpecialistSummary]


# ===== Helpers =====

def _child_detail(child: Child, specialists_by_id: dict[int, Specialist]) -> ChildDetailResponse:
    detail = ChildDetailResponse.model_validate(child)
    if child.parent is not None:
        detail.parent = ActorSummary.model_validate(child.parent)
    specialist = specialists_by_id.get(child.assigned_specialist_id) if child.assigned_specialist_id else None
    if specialist is not None:
        detail.assigned_specialist = SpecialistSummary.model_validate(specialist)
    return detail


def _specialists_by_id(db: Session, children: List[Child]) -> dict[int, Specialist]:
    ids = {c.assigned_specialist_id for c in children if c.assigned_specialist_id is not None}
    if not ids:
        return {}
    return {s.id: s for s in db.query(Specialist).filter(Specialist.id.in_(ids)).all()}


# ===== Center =====

@router.get("/center", summary="Get the admin's center")
async def get_center(
    ctx: CenterAdminContext = Depends(require_center_admin),
    db: Session = Depends(get_db)
) -> CenterEnvelope:
    specialists = LinkGraph.specialists_in_center(db, ctx.center.id)
    return CenterEnvelope(
        center=CenterResponse.model_validate(ctx.center),
        specialists=[SpecialistSummary.model_validate(s) for s in specialists],
    )


@router.put("/center", summary="Update the admin's center")
@router.post("/center", summary="Update the admin's center (POST alias)")
async def update_center(
    request: CenterUpdateRequest,
    ctx: CenterAdminContext = Depends(require_center_admin),
    db: Session = Depends(get_db)
) -> CenterEnvelope:
    center = CenterService.update_center(db, ctx.center, request.model_dump(exclude_unset=True))
    return CenterEnvelope(message="تم تحديث بيانات المركز", center=CenterResponse.model_validate(center))


@router.get("/centers/{center_id}", summary="Get a center by id")
async def get_center_by_id(
    center_id: int,
    ctx=Depends(require_roles(ActorRole.ADMIN)),
    db: Session = Depends(get_db)
) -> CenterEnvelope:
    """Only the admin's own center is visible."""
    center = CenterService.get_center_for_admin(db, ctx.actor, center_id)
    specialists = LinkGraph.specialists_in_center(db, center.id)
    return CenterEnvelope(
        center=CenterResponse.model_validate(center),
        specialists=[SpecialistSummary.model_validate(s) for s in specialists],
    )


# ===== Specialists =====

@router.get("/specialists", summary="List the center's specialists")
async def list_specialists(
    ctx: CenterAdminContext = Depends(require_center_admin),
    db: Session = Depends(get_db)
) -> SpecialistListResponse:
    items = []
    for specialist in LinkGraph.specialists_in_center(db, ctx.center.id):
        item = SpecialistListItem.model_validate(specialist)
        item.linked_parents = [
            ActorSummary.model_validate(p) for p in CenterService.linked_parents(db, specialist)
        ]
        items.append(item)
    return SpecialistListResponse(count=len(items), specialists=items)


@router.get("/specialists/{specialist_id}", summary="Get a specialist with reachable children")
async def get_specialist(
    specialist_id: int,
    ctx: CenterAdminContext = Depends(require_center_admin),
    db: Session = Depends(get_db)
) -> SpecialistDetailEnvelope:
    specialist = CenterService.get_specialist_in_center(db, ctx.center, specialist_id)
    children = CenterService.reachable_children(db, specialist)
    specialists_by_id = _specialists_by_id(db, children)

    detail = SpecialistDetail.model_validate(specialist)
    detail.linked_parents = [ParentSummary.model_validate(p) for p in CenterService.linked_parents(db, specialist)]
    detail.assigned_children = [_child_detail(c, specialists_by_id) for c in children]
    return SpecialistDetailEnvelope(specialist=detail)


@router.post("/create-specialist", summary="Create a specialist in the center", status_code=status.HTTP_201_CREATED)
async def create_specialist(
    request: SpecialistCreateRequest,
    ctx: CenterAdminContext = Depends(require_center_admin),
    db: Session = Depends(get_db)
) -> SpecialistEnvelope:
    specialist = CenterService.create_specialist(db, ctx.center, ctx.admin, request.model_dump(exclude_unset=True))
    return SpecialistEnvelope(
        message="تم إنشاء حساب الأخصائي بنجاح",
        specialist=ActorResponse.model_validate(specialist),
    )


@router.put("/specialists/{specialist_id}", summary="Update a specialist")
async def update_specialist(
    specialist_id: int,
    request: SpecialistUpdateRequest,
    ctx: CenterAdminContext = Depends(require_center_admin),
    db: Session = Depends(get_db)
) -> SpecialistEnvelope:
    specialist = CenterService.get_specialist_in_center(db, ctx.center, specialist_id)
    specialist = CenterService.update_specialist(db, specialist, request.model_dump(exclude_unset=True))
    return SpecialistEnvelope(
        message="تم تحديث الأخصائي بنجاح",
        specialist=ActorResponse.model_validate(specialist),
    )


@router.delete("/specialists/{specialist_id}", summary="Remove a specialist from the center")
async def remove_specialist(
    specialist_id: int,
    ctx: CenterAdminContext = Depends(require_center_admin),
    db: Session = Depends(get_db)
) -> SuccessResponse:
    specialist = CenterService.get_specialist_in_center(db, ctx.center, specialist_id)
    CenterService.remove_specialist(db, ctx.center, specialist)
    return SuccessResponse(message="تم إزالة الأخصائي من المركز بنجاح")


# ===== Linking =====

@router.post("/specialists/{specialist_id}/link-parent", summary="Link a parent to a specialist")
async def link_parent(
    specialist_id: int,
    request: LinkParentRequest,
    ctx: CenterAdminContext = Depends(require_center_admin),
    db: Session = Depends(get_db)
) -> SuccessResponse:
    specialist = CenterService.get_specialist_in_center(db, ctx.center, specialist_id)
    parent = db.query(Parent).filter(Parent.id == request.parent_id).first()
    if parent is None:
        raise NotFoundError("ولي الأمر غير موجود")

    LinkGraph.link_parent_to_specialist(db, parent, specialist)
    return SuccessResponse(message="تم ربط ولي الأمر بالأخصائي")


@router.post("/specialists/{specialist_id}/unlink-parent/{parent_id}", summary="Unlink a parent from a specialist")
async def unlink_parent(
    specialist_id: int,
    parent_id: int,
    ctx: CenterAdminContext = Depends(require_center_admin),
    db: Session = Depends(get_db)
) -> SuccessResponse:
    specialist = CenterService.get_specialist_in_center(db, ctx.center, specialist_id)
    LinkGraph.unlink_parent_from_specialist(db, parent_id, specialist)
    return SuccessResponse(message="تم إلغاء ربط ولي الأمر")


@router.post("/specialists/{specialist_id}/link-child", summary="Assign a child to a specialist")
async def link_child(
    specialist_id: int,
    request: LinkChildRequest,
    ctx: CenterAdminContext = Depends(require_center_admin),
    db: Session = Depends(get_db)
) -> SuccessResponse:
    specialist = CenterService.get_specialist_in_center(db, ctx.center, specialist_id)
    child = ChildService.get_child(db, request.child_id)

    LinkGraph.assign_child_to_specialist(db, child, specialist)
    return SuccessResponse(message="تم تعيين الطفل للأخصائي")


@router.post("/specialists/{specialist_id}/unlink-child/{child_id}", summary="Unassign a child from a specialist")
async def unlink_child(
    specialist_id: int,
    child_id: int,
    ctx: CenterAdminContext = Depends(require_center_admin),
    db: Session = Depends(get_db)
) -> SuccessResponse:
    specialist = CenterService.get_specialist_in_center(db, ctx.center, specialist_id)
    child = ChildService.get_child(db, child_id)

    LinkGraph.unassign_child(db, child, specialist)
    return SuccessResponse(message="تم إلغاء تعيين الطفل")


@router.get("/specialists/{specialist_id}/search-parents", summary="Search parents to link")
async def search_parents(
    specialist_id: int,
    query: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    ctx: CenterAdminContext = Depends(require_center_admin),
    db: Session = Depends(get_db)
) -> ParentListResponse:
    """
    Parents not yet linked to the specialist. ``query`` (or ``search``) filters
    by a case-insensitive substring of name or email.
    """
    specialist = CenterService.get_specialist_in_center(db, ctx.center, specialist_id)
    parents = LinkGraph.search_linkable_parents(db, specialist, query if query is not None else search)
    return ParentListResponse(
        count=len(parents),
        parents=[ParentSummary.model_validate(p) for p in parents],
    )


# ===== Center-wide views =====

@router.get("/parents", summary="List the center's parents")
async def list_parents(
    ctx: CenterAdminContext = Depends(require_center_admin),
    db: Session = Depends(get_db)
) -> ParentListResponse:
    parents = LinkGraph.parents_of_center(db, ctx.center.id)
    return ParentListResponse(
        count=len(parents),
        parents=[ParentSummary.model_validate(p) for p in parents],
    )


@router.get("/my-children", summary="List the center's children")
async def list_center_children(
    ctx: CenterAdminContext = Depends(require_center_admin),
    db: Session = Depends(get_db)
) -> ChildListResponse:
    children = LinkGraph.children_of_center(db, ctx.center.id)
    specialists_by_id = _specialists_by_id(db, children)
    return ChildListResponse(
        count=len(children),
        children=[_child_detail(c, specialists_by_id) for c in children],
    )


@router.get("/stats", summary="Center statistics")
async def get_stats(
    ctx: CenterAdminContext = Depends(require_center_admin),
    db: Session = Depends(get_db)
) -> StatsResponse:
    return StatsResponse(
        stats=CenterService.stats(db, ctx.center),
        recent_specialists=[
            SpecialistSummary.model_validate(s) for s in CenterService.recent_specialists(db, ctx.center)
        ],
    )
