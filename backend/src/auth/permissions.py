# pyright: reportMissingTypeStubs=false
"""
Resource-scoped authorization checks.

Run after the role check. Each check walks the link graph for the resolved
actor and raises AuthorizationError with the generic message on failure, so
callers cannot tell a role failure from a relationship failure.
"""

import logging

from sqlalchemy.orm import Session

from auth.dependencies import ActorContext
from core.errors import AuthorizationError
from models import ActorRole, Child, Exercise, Specialist
from services.link_graph import LinkGraph

logger = logging.getLogger(__name__)


def _deny(ctx: ActorContext, what: str) -> None:
    logger.info(f"Actor {ctx.actor_id} ({ctx.actor.role}) denied {what}")
    raise AuthorizationError()


def can_read_child(db: Session, ctx: ActorContext, child: Child) -> bool:
    match ctx.role:
        case ActorRole.PARENT:
            return LinkGraph.can_parent_act_on_child(ctx.actor, child)  # type: ignore[arg-type]
        case ActorRole.SPECIALIST:
            return LinkGraph.can_specialist_act_on_child(db, ctx.actor, child)  # type: ignore[arg-type]
        case ActorRole.ADMIN:
            center = LinkGraph.center_of(db, ctx.actor)  # type: ignore[arg-type]
            return LinkGraph.is_child_in_center(db, center.id, child)
        case ActorRole.SUPERADMIN:
            return False


def can_modify_child(db: Session, ctx: ActorContext, child: Child) -> bool:
    match ctx.role:
        case ActorRole.PARENT:
            return LinkGraph.can_parent_act_on_child(ctx.actor, child)  # type: ignore[arg-type]
        case ActorRole.SPECIALIST:
            return LinkGraph.can_specialist_act_on_child(db, ctx.actor, child)  # type: ignore[arg-type]
        case ActorRole.ADMIN | ActorRole.SUPERADMIN:
            return False


def ensure_can_read_child(db: Session, ctx: ActorContext, child: Child) -> None:
    """Owner parent, a specialist reaching the child, or the admin of a center reaching it."""
    if not can_read_child(db, ctx, child):
        _deny(ctx, f"read of child {child.id}")


def ensure_can_modify_child(db: Session, ctx: ActorContext, child: Child) -> None:
    """Owner parent or a specialist reaching the child."""
    if not can_modify_child(db, ctx, child):
        _deny(ctx, f"change of child {child.id}")


def ensure_can_manage_exercise(db: Session, ctx: ActorContext, exercise: Exercise, child: Child) -> None:
    """
    The plan's author, or any specialist who may act on the plan's child.
    """
    if ctx.role != ActorRole.SPECIALIST:
        _deny(ctx, f"exercise {exercise.id}")
    specialist: Specialist = ctx.actor  # type: ignore[assignment]
    if exercise.specialist_id is not None and exercise.specialist_id == specialist.id:
        return
    if not LinkGraph.can_specialist_act_on_child(db, specialist, child):
        _deny(ctx, f"exercise {exercise.id}")
