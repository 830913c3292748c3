"""initial_schema_baseline

Revision ID: 3b9e2c71d4a0
Revises:
Create Date: 2026-10-17 09:12:40.118204

Creates the identity tables (actors with parent/specialist/admin profiles),
the specialist-parent link set, centers, children, exercises and the display
id counters from the current model definitions.
"""
from typing import Sequence, Union
import sys
import os

# Add src directory to path to import models
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from alembic import op
import sqlalchemy as sa

# Import all models to ensure they're registered with Base.metadata
from core.database import Base
from models import (
    Actor, Parent, Specialist, Admin, SpecialistParentLink, Center, Child, Exercise, IdCounter
)


# revision identifiers, used by Alembic.
revision: str = '3b9e2c71d4a0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


COUNTER_NAMES = ("parentStaffId", "specialistStaffId", "adminStaffId", "childId")


def upgrade() -> None:
    """
    Create all tables, including the partial unique indexes on exercises
    (one content row per child, one active plan per child).
    """
    Base.metadata.create_all(bind=op.get_bind())

    # Counters start at zero; the id counter service bootstraps from existing
    # rows when a counter is missing, so seeding here only saves that query.
    id_counters = sa.table(
        'id_counters',
        sa.column('name', sa.String),
        sa.column('seq', sa.Integer),
    )
    op.bulk_insert(id_counters, [{'name': name, 'seq': 0} for name in COUNTER_NAMES])


def downgrade() -> None:
    Base.metadata.drop_all(bind=op.get_bind())
