"""
Center service for center-scoped administration.

Every operation here takes the center already resolved through
``LinkGraph.center_of`` and never reaches outside it: specialists are looked
up inside the center, and statistics count only what the center reaches
through the link graph.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.constants import RECENT_SPECIALISTS_LIMIT
from core.errors import (
    AuthorizationError, ConflictError, DuplicateEmailError, NotFoundError, ValidationError
)
from models import Admin, ActorKind, ActorRole, Center, Child, Parent, Specialist
from services.actor_service import ActorService
from services.link_graph import LinkGraph

logger = logging.getLogger(__name__)


SPECIALIST_NOT_FOUND_MESSAGE = "الأخصائي غير موجود"
CENTER_NOT_FOUND_MESSAGE = "المركز غير موجود"

CENTER_FIELDS = ("name", "name_en", "address", "phone", "email", "description", "is_active")
SPECIALIST_FIELDS = ("name", "phone", "specialization", "license_number")


class CenterService:
    """
    Service class for center administration.
    """

    # ===== Center =====

    @staticmethod
    def update_center(db: Session, center: Center, fields: Dict[str, Any]) -> Center:
        values = {k: v for k, v in fields.items() if k in CENTER_FIELDS}
        if "name" in values and not (values["name"] or "").strip():
            raise ValidationError("اسم المركز مطلوب")
        if "is_active" in values and values["is_active"] is None:
            raise ValidationError("is_active cannot be empty")

        for key, value in values.items():
            setattr(center, key, value)
        db.commit()
        db.refresh(center)

        logger.info(f"Updated center {center.id}: {sorted(values)}")
        return center

    @staticmethod
    def get_center_for_admin(db: Session, admin: Admin, center_id: int) -> Center:
        """
        A center looked up by id, visible only to the admin who administers it.

        Raises:
            NotFoundError: Unknown center
            AuthorizationError: The center is not the admin's own
        """
        center = db.query(Center).filter(Center.id == center_id).first()
        if center is None:
            raise NotFoundError(CENTER_NOT_FOUND_MESSAGE)
        own = LinkGraph.center_of(db, admin)
        if own.id != center.id:
            raise AuthorizationError()
        return center

    # ===== Specialists =====

    @staticmethod
    def get_specialist_in_center(db: Session, center: Center, specialist_id: int) -> Specialist:
        """
        Raises:
            NotFoundError: Unknown specialist
            AuthorizationError: The specialist belongs to another center or none
        """
        specialist = db.query(Specialist).filter(Specialist.id == specialist_id).first()
        if specialist is None:
            raise NotFoundError(SPECIALIST_NOT_FOUND_MESSAGE)
        if not LinkGraph.is_specialist_in_center(specialist, center):
            logger.warning(f"Specialist {specialist_id} is outside center {center.id}")
            raise AuthorizationError()
        return specialist

    @staticmethod
    def linked_parents(db: Session, specialist: Specialist) -> List[Parent]:
        parent_ids = LinkGraph.linked_parent_ids(db, specialist.id)
        if not parent_ids:
            return []
        return db.query(Parent).filter(Parent.id.in_(parent_ids)).order_by(Parent.id).all()

    @staticmethod
    def reachable_children(db: Session, specialist: Specialist) -> List[Child]:
        """
        Children the specialist reaches: assigned, or owned by a parent linked
        to the specialist from either side of the link.
        """
        parent_ids = LinkGraph.linked_parent_ids(db, specialist.id)
        pointer_rows = db.query(Parent.id).filter(Parent.linked_specialist_id == specialist.id).all()
        parent_ids |= {row[0] for row in pointer_rows}

        query = db.query(Child)
        if parent_ids:
            query = query.filter(
                (Child.assigned_specialist_id == specialist.id) | (Child.parent_id.in_(parent_ids))
            )
        else:
            query = query.filter(Child.assigned_specialist_id == specialist.id)
        return query.order_by(Child.id).all()

    @staticmethod
    def create_specialist(db: Session, center: Center, admin: Admin, fields: Dict[str, Any]) -> Specialist:
        """
        Create a specialist account inside the center.

        Accounts made by an admin start with a verified email.
        """
        if not fields.get("name") or not fields.get("email") or not fields.get("password"):
            raise ValidationError("الاسم والبريد الإلكتروني وكلمة المرور مطلوبة")

        values = {k: v for k, v in fields.items() if k in SPECIALIST_FIELDS + ("email", "password")}
        values.update(
            role=ActorRole.SPECIALIST.value,
            center_id=center.id,
            created_by_id=admin.id,
            email_verified=True,
        )
        try:
            specialist = ActorService.create_actor(db, ActorKind.SPECIALIST, values)
        except DuplicateEmailError:
            raise DuplicateEmailError("البريد الإلكتروني مستخدم بالفعل")

        logger.info(f"Admin {admin.id} created specialist {specialist.id} in center {center.id}")
        return specialist

    @staticmethod
    def update_specialist(db: Session, specialist: Specialist, fields: Dict[str, Any]) -> Specialist:
        values = {k: v for k, v in fields.items() if k in SPECIALIST_FIELDS}
        if "name" in values and not (values["name"] or "").strip():
            del values["name"]

        for key, value in values.items():
            setattr(specialist, key, value)
        db.commit()
        db.refresh(specialist)

        logger.info(f"Updated specialist {specialist.id}: {sorted(values)}")
        return specialist

    @staticmethod
    def remove_specialist(db: Session, center: Center, specialist: Specialist) -> None:
        """Detach the specialist from the center. The account itself stays."""
        specialist.center_id = None
        db.commit()
        logger.info(f"Removed specialist {specialist.id} from center {center.id}")

    # ===== Statistics =====

    @staticmethod
    def recent_specialists(db: Session, center: Center, limit: int = RECENT_SPECIALISTS_LIMIT) -> List[Specialist]:
        return db.query(Specialist).filter(
            Specialist.center_id == center.id
        ).order_by(Specialist.created_at.desc(), Specialist.id.desc()).limit(limit).all()

    @staticmethod
    def stats(db: Session, center: Center) -> Dict[str, int]:
        """
        Center counts derived from the link graph.

        Parents are the union of both link sides; children are those assigned
        to a center specialist or owned by a parent of the center.
        """
        specialists_count = len(LinkGraph.specialist_ids_in_center(db, center.id))
        parents_count = len(LinkGraph.parent_ids_of_center(db, center.id))
        children_count = len(LinkGraph.children_of_center(db, center.id))
        return {
            "specialists": specialists_count,
            "centerSpecialists": specialists_count,
            "parents": parents_count,
            "myParents": parents_count,
            "children": children_count,
            "centerChildren": children_count,
            "myChildren": children_count,
        }

    # ===== Provisioning =====

    @staticmethod
    def list_centers(db: Session) -> List[Center]:
        return db.query(Center).order_by(Center.id).all()

    @staticmethod
    def provision_center(db: Session, admin_id: int, fields: Dict[str, Any]) -> Center:
        """
        Create a center administered by an existing admin.

        ``center.admin_id`` and ``admin.center_id`` are written in one commit.

        Raises:
            NotFoundError: No admin with that id
            ValidationError: The account is not a center admin, already has a
                center, or the name is missing
        """
        values = {k: v for k, v in fields.items() if k in CENTER_FIELDS}
        if not (values.get("name") or "").strip():
            raise ValidationError("اسم المركز مطلوب")

        admin: Optional[Admin] = db.query(Admin).filter(Admin.id == admin_id).first()
        if admin is None:
            raise NotFoundError("Admin not found")
        if admin.role != ActorRole.ADMIN.value:
            raise ValidationError("Only center admins can administer a center")
        if db.query(Center).filter(Center.admin_id == admin.id).first() is not None:
            raise ValidationError("Admin already administers a center")

        center = Center(admin_id=admin.id, **values)
        db.add(center)
        try:
            db.flush()
            admin.center_id = center.id
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Concurrent center provisioning for admin {admin_id}: {e}")
            raise ConflictError()
        db.refresh(center)

        logger.info(f"Provisioned center {center.id} for admin {admin.id}")
        return center
