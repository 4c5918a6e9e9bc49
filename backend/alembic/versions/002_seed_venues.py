"""Seed the venue catalog.

Revision ID: 002
Revises: 001
Create Date: 2025-11-20
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SEED_VENUES = [
    {
        "name": "City Hall Auditorium",
        "address": "Main Street 1",
        "capacity": 200,
        "description": "Large hall suitable for conferences, concerts and public events.",
    },
    {
        "name": "Conference Room A",
        "address": "Business Center, 2nd Floor",
        "capacity": 40,
        "description": "Perfect for meetings, workshops and small presentations.",
    },
    {
        "name": "Community Hall",
        "address": "Park Avenue 10",
        "capacity": 120,
        "description": "Flexible space for community events, fairs and parties.",
    },
]

venues = sa.table(
    "venues",
    sa.column("name", sa.String),
    sa.column("address", sa.String),
    sa.column("capacity", sa.Integer),
    sa.column("description", sa.String),
)


def upgrade() -> None:
    op.bulk_insert(venues, SEED_VENUES)


def downgrade() -> None:
    op.execute(
        venues.delete().where(venues.c.name.in_([v["name"] for v in SEED_VENUES]))
    )
