"""Directory schema: cities, resources, admin role assignments, tracked users, update queue

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── 1. Cities ─────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE cities (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            slug VARCHAR(100) NOT NULL,
            name VARCHAR(255) NOT NULL,
            state VARCHAR(100),
            center_lat DOUBLE PRECISION,
            center_lng DOUBLE PRECISION,
            default_zoom INTEGER NOT NULL DEFAULT 12,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_cities_slug UNIQUE (slug)
        );
    """)

    # ── 2. Resources ──────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE resources (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            city_id UUID NOT NULL REFERENCES cities(id) ON DELETE CASCADE,
            category VARCHAR(20) NOT NULL DEFAULT 'food',
            external_id VARCHAR(100) NOT NULL,
            name VARCHAR(255) NOT NULL,
            address VARCHAR(500) NOT NULL,
            lat DOUBLE PRECISION,
            lng DOUBLE PRECISION,
            hours VARCHAR(255),
            days_open VARCHAR(255),
            phone VARCHAR(50),
            website VARCHAR(500),
            requires_id BOOLEAN NOT NULL DEFAULT false,
            walk_in BOOLEAN NOT NULL DEFAULT false,
            notes TEXT,
            availability_status VARCHAR(20),
            last_available_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_resources_city_category_external_id UNIQUE (city_id, category, external_id)
        );
    """)
    op.execute("CREATE INDEX ix_resources_city_id ON resources (city_id);")

    # ── 3. Admin role assignments ─────────────────────────────────────────
    # role / scope_type stay VARCHAR so unknown values can be skipped at read time
    op.execute("""
        CREATE TABLE admin_role_assignments (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_email VARCHAR(255) NOT NULL,
            role VARCHAR(32) NOT NULL,
            scope_type VARCHAR(32) NOT NULL,
            city_slug VARCHAR(100),
            location_id VARCHAR(100),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_admin_role_assignments_grant
                UNIQUE NULLS NOT DISTINCT (user_email, role, scope_type, city_slug, location_id)
        );
    """)
    op.execute(
        "CREATE INDEX ix_admin_role_assignments_user_email ON admin_role_assignments (user_email);"
    )

    # ── 4. Tracked users ──────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE tracked_users (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            email VARCHAR(255) NOT NULL,
            name VARCHAR(255),
            last_sign_in_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_tracked_users_email UNIQUE (email)
        );
    """)

    # ── 5. Resource update requests ───────────────────────────────────────
    op.execute("""
        CREATE TABLE resource_update_requests (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            city_slug VARCHAR(100) NOT NULL,
            resource_external_id VARCHAR(100),
            category VARCHAR(20) NOT NULL,
            change_type VARCHAR(20) NOT NULL,
            payload JSONB NOT NULL DEFAULT '{}',
            submitted_by_email VARCHAR(255) NOT NULL,
            submitted_by_name VARCHAR(255),
            submitted_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            status VARCHAR(20) NOT NULL DEFAULT 'pending',
            reviewed_by_email VARCHAR(255),
            reviewed_at TIMESTAMPTZ,
            review_note TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT ck_resource_update_requests_status
                CHECK (status IN ('pending', 'approved', 'rejected'))
        );
    """)
    op.execute(
        "CREATE INDEX ix_resource_update_requests_status_submitted "
        "ON resource_update_requests (status, submitted_at);"
    )
    op.execute(
        "CREATE INDEX ix_resource_update_requests_city_slug ON resource_update_requests (city_slug);"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS resource_update_requests;")
    op.execute("DROP TABLE IF EXISTS tracked_users;")
    op.execute("DROP TABLE IF EXISTS admin_role_assignments;")
    op.execute("DROP TABLE IF EXISTS resources;")
    op.execute("DROP TABLE IF EXISTS cities;")
