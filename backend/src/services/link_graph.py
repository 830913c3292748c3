"""
Link graph service.

The relationship graph connects centers, specialists, parents and children:

    center <- specialist.center_id
    specialist <-> parent      (SpecialistParentLink rows and parent.linked_specialist_id)
    parent <- child.parent_id
    specialist <- child.assigned_specialist_id

Authorization to act on a child (and everything hanging off a child, such as
exercise plans) is derived by walking these edges rather than from direct
ownership. All traversals here are reads; the mutations keep both sides of the
specialist/parent link in agreement by writing them in one transaction.

Link data can predate the two-sided bookkeeping, so center-wide traversals
union both sources of a specialist/parent edge.
"""

import logging
from typing import List, Optional, Set

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.constants import PARENT_SEARCH_LIMIT
from core.errors import (
    AuthorizationError, InternalError, NO_CENTER_MESSAGE, CENTER_ACCESS_DENIED_MESSAGE
)
from models import Admin, Center, Child, Parent, Specialist, SpecialistParentLink

logger = logging.getLogger(__name__)


class LinkGraph:
    """
    Traversals and link mutations over the center/specialist/parent/child graph.
    """

    # ===== Center scope =====

    @staticmethod
    def center_of(db: Session, admin: Admin) -> Center:
        """
        Resolve the center an admin administers.

        The admin's center pointer must name a center whose admin back-reference
        is this admin. A missing or stale pointer grants no access.

        Raises:
            AuthorizationError: No center set, center missing, or back-reference mismatch
        """
        if admin.center_id is None:
            raise AuthorizationError(NO_CENTER_MESSAGE)

        center = db.query(Center).filter(Center.id == admin.center_id).first()
        if center is None or center.admin_id is None or center.admin_id != admin.id:
            logger.warning(f"Admin {admin.id} has a stale center pointer ({admin.center_id})")
            raise AuthorizationError(CENTER_ACCESS_DENIED_MESSAGE)
        return center

    @staticmethod
    def specialists_in_center(db: Session, center_id: int) -> List[Specialist]:
        """All specialists whose center is the given center."""
        return db.query(Specialist).filter(
            Specialist.center_id == center_id
        ).order_by(Specialist.id).all()

    @staticmethod
    def specialist_ids_in_center(db: Session, center_id: int) -> List[int]:
        rows = db.query(Specialist.id).filter(Specialist.center_id == center_id).all()
        return [row[0] for row in rows]

    @staticmethod
    def is_specialist_in_center(specialist: Optional[Specialist], center: Center) -> bool:
        return specialist is not None and specialist.center_id is not None and specialist.center_id == center.id

    @staticmethod
    def parent_ids_of_center(db: Session, center_id: int) -> Set[int]:
        """
        Ids of parents reachable from the center's specialists.

        Union of the specialists' linked parents and of parents whose
        linked specialist is one of the center's specialists.
        """
        specialist_ids = LinkGraph.specialist_ids_in_center(db, center_id)
        if not specialist_ids:
            return set()

        via_links = db.query(SpecialistParentLink.parent_id).filter(
            SpecialistParentLink.specialist_id.in_(specialist_ids)
        ).all()
        via_pointer = db.query(Parent.id).filter(
            Parent.linked_specialist_id.in_(specialist_ids)
        ).all()
        return {row[0] for row in via_links} | {row[0] for row in via_pointer}

    @staticmethod
    def parents_of_center(db: Session, center_id: int) -> List[Parent]:
        """Parents reachable from the center, deduplicated."""
        parent_ids = LinkGraph.parent_ids_of_center(db, center_id)
        if not parent_ids:
            return []
        return db.query(Parent).filter(Parent.id.in_(parent_ids)).order_by(Parent.id).all()

    @staticmethod
    def children_of_center(db: Session, center_id: int) -> List[Child]:
        """
        Children assigned to a center specialist, or owned by a parent of the center.
        """
        specialist_ids = LinkGraph.specialist_ids_in_center(db, center_id)
        if not specialist_ids:
            return []
        parent_ids = LinkGraph.parent_ids_of_center(db, center_id)

        conditions = [Child.assigned_specialist_id.in_(specialist_ids)]
        if parent_ids:
            conditions.append(Child.parent_id.in_(parent_ids))
        return db.query(Child).filter(or_(*conditions)).order_by(Child.id).all()

    @staticmethod
    def is_child_in_center(db: Session, center_id: int, child: Child) -> bool:
        specialist_ids = LinkGraph.specialist_ids_in_center(db, center_id)
        if child.assigned_specialist_id is not None and child.assigned_specialist_id in specialist_ids:
            return True
        return child.parent_id in LinkGraph.parent_ids_of_center(db, center_id)

    # ===== Specialist / parent reach =====

    @staticmethod
    def linked_parent_ids(db: Session, specialist_id: int) -> Set[int]:
        """The specialist's linked parents."""
        rows = db.query(SpecialistParentLink.parent_id).filter(
            SpecialistParentLink.specialist_id == specialist_id
        ).all()
        return {row[0] for row in rows}

    @staticmethod
    def can_specialist_act_on_child(db: Session, specialist: Specialist, child: Child) -> bool:
        """
        A specialist may act on a child assigned to them, or on a child whose
        parent is one of their linked parents.
        """
        if child.assigned_specialist_id is not None and child.assigned_specialist_id == specialist.id:
            return True
        return db.query(SpecialistParentLink).filter(
            SpecialistParentLink.specialist_id == specialist.id,
            SpecialistParentLink.parent_id == child.parent_id
        ).first() is not None

    @staticmethod
    def can_parent_act_on_child(parent: Parent, child: Child) -> bool:
        """Only the owning parent. No transitive reach."""
        return child.parent_id == parent.id

    @staticmethod
    def children_of_specialist(db: Session, specialist: Specialist) -> List[Child]:
        """Every child the specialist may act on."""
        conditions = [Child.assigned_specialist_id == specialist.id]
        parent_ids = LinkGraph.linked_parent_ids(db, specialist.id)
        if parent_ids:
            conditions.append(Child.parent_id.in_(parent_ids))
        return db.query(Child).filter(or_(*conditions)).order_by(Child.id).all()

    @staticmethod
    def search_linkable_parents(
        db: Session,
        specialist: Specialist,
        query: Optional[str],
        limit: int = PARENT_SEARCH_LIMIT
    ) -> List[Parent]:
        """
        Parents not yet linked to the specialist, optionally filtered by a
        case-insensitive substring of name or email.
        """
        parents = db.query(Parent)

        linked = LinkGraph.linked_parent_ids(db, specialist.id)
        if linked:
            parents = parents.filter(Parent.id.notin_(linked))

        term = (query or "").strip().lower()
        if term:
            parents = parents.filter(or_(
                func.lower(Parent.name).contains(term, autoescape=True),
                func.lower(Parent.email).contains(term, autoescape=True),
            ))

        return parents.order_by(Parent.id).limit(limit).all()

    # ===== Mutations =====

    @staticmethod
    def link_parent_to_specialist(db: Session, parent: Parent, specialist: Specialist) -> None:
        """
        Link a parent to a specialist on both sides.

        Adds the parent to the specialist's linked parents (no-op if present)
        and points the parent at the specialist, committing both together.
        """
        try:
            existing = db.query(SpecialistParentLink).filter(
                SpecialistParentLink.specialist_id == specialist.id,
                SpecialistParentLink.parent_id == parent.id
            ).first()
            if existing is None:
                db.add(SpecialistParentLink(specialist_id=specialist.id, parent_id=parent.id))
            parent.linked_specialist_id = specialist.id
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to link parent {parent.id} to specialist {specialist.id}: {e}")
            raise InternalError(str(e))

        logger.info(f"Linked parent {parent.id} to specialist {specialist.id}")

    @staticmethod
    def unlink_parent_from_specialist(db: Session, parent_id: int, specialist: Specialist) -> None:
        """
        Remove the link on both sides.

        The parent's pointer is only cleared when it names this specialist, so
        unlinking never detaches a parent from a different specialist.
        """
        try:
            db.query(SpecialistParentLink).filter(
                SpecialistParentLink.specialist_id == specialist.id,
                SpecialistParentLink.parent_id == parent_id
            ).delete(synchronize_session="fetch")

            parent = db.query(Parent).filter(Parent.id == parent_id).first()
            if parent is not None and parent.linked_specialist_id == specialist.id:
                parent.linked_specialist_id = None
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to unlink parent {parent_id} from specialist {specialist.id}: {e}")
            raise InternalError(str(e))

        logger.info(f"Unlinked parent {parent_id} from specialist {specialist.id}")

    @staticmethod
    def assign_child_to_specialist(db: Session, child: Child, specialist: Specialist) -> None:
        """Assignment is single-valued on the child; no reverse list to maintain."""
        child.assigned_specialist_id = specialist.id
        db.commit()
        logger.info(f"Assigned child {child.id} to specialist {specialist.id}")

    @staticmethod
    def unassign_child(db: Session, child: Child, specialist: Specialist) -> None:
        """Clear the assignment if it names this specialist."""
        if child.assigned_specialist_id != specialist.id:
            return
        child.assigned_specialist_id = None
        db.commit()
        logger.info(f"Unassigned child {child.id} from specialist {specialist.id}")
