"""seed_admin_user

Revision ID: 0002_seed_admin_user
Revises: 0001_initial_schema
Create Date: 2026-10-18

Seeds the first administrator (username: admin, password: Admin@123).
Change the password after the first login. Classes, subjects, exams and
sample students are seeded from the API by that administrator.
"""
from typing import Sequence, Union
from datetime import datetime, timezone

from alembic import op
from sqlalchemy.sql import text
from passlib.context import CryptContext


# revision identifiers, used by Alembic.
revision: str = '0002_seed_admin_user'
down_revision: Union[str, None] = '0001_initial_schema'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Password hashing for seeding
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def upgrade() -> None:
    """Create the administrator account."""
    conn = op.get_bind()
    now = datetime.now(timezone.utc)

    print("🌱 Creating Admin user (username: admin)...")
    password_hash = pwd_context.hash("Admin@123", rounds=12)
    conn.execute(text("""
        INSERT INTO users (name, username, password_hash, role, is_active, created_at, updated_at)
        VALUES ('System Administrator', 'admin', :password_hash, 'ADMIN', true, :now, :now)
    """), {"password_hash": password_hash, "now": now})


def downgrade() -> None:
    """Remove the seeded administrator."""
    conn = op.get_bind()
    conn.execute(text("DELETE FROM users WHERE username = 'admin'"))
