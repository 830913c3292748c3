"""
Services package for shared business logic.

This package contains service classes that encapsulate business logic
shared across multiple API endpoints.
"""

from .actor_service import ActorService
from .child_service import ChildService
from .exercise_service import ExerciseService
from .center_service import CenterService
from .link_graph import LinkGraph
from .verification_service import VerificationService

__all__ = [
    "ActorService",
    "ChildService",
    "ExerciseService",
    "CenterService",
    "LinkGraph",
    "VerificationService",
]
