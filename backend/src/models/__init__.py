# Package initialization
# Import all models to ensure relationships are properly established
from .actor import Actor, ActorKind, ActorRole, Parent, Specialist, Admin, SpecialistParentLink
from .center import Center
from .child import Child
from .exercise import Exercise, ExerciseKind
from .id_counter import IdCounter

__all__ = [
    "Actor",
    "ActorKind",
    "ActorRole",
    "Parent",
    "Specialist",
    "Admin",
    "SpecialistParentLink",
    "Center",
    "Child",
    "Exercise",
    "ExerciseKind",
    "IdCounter",
]
