"""initial_schema

Create the schema for the identity-linking engine:
- Organization members (projection of the surrounding system's users)
- External identities (one row per organization/provider/provider user)
- Link suggestions (candidate links awaiting review)
- Link audits (append-only history of link state changes)
- Identity settings (per-organization thresholds and policies)

Revision ID: 3f1c2a9d7e40
Revises:
Create Date: 2025-03-01 12:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d7e40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    # Enable required extensions
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ========================================================================
    # ORGANIZATION_MEMBERS table (read model, owned by the surrounding system)
    # ========================================================================
    op.create_table(
        "organization_members",
        sa.Column("organization_id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.PrimaryKeyConstraint("organization_id", "user_id"),
    )
    op.create_index(
        "idx_organization_members_email",
        "organization_members",
        ["organization_id", "email"],
    )

    # ========================================================================
    # EXTERNAL_IDENTITIES table
    # ========================================================================
    op.create_table(
        "external_identities",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("organization_id", sa.UUID(), nullable=False),
        sa.Column("provider", sa.String(50), nullable=False),  # 'slack', 'google', 'notion'
        sa.Column("provider_user_id", sa.String(255), nullable=False),
        sa.Column("provider_team_id", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("real_name", sa.String(255), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("user_id", sa.UUID(), nullable=True),
        sa.Column(
            "link_status", sa.String(20), nullable=False, server_default="unlinked"
        ),
        sa.Column("link_method", sa.String(20), nullable=True),
        sa.Column("link_confidence", sa.Numeric(3, 2), nullable=True),
        sa.Column("linked_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("linked_by", sa.String(255), nullable=True),
        sa.Column(
            "last_synced_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column("sync_error", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "organization_id",
            "provider",
            "provider_user_id",
            name="uq_external_identity_provider",
        ),
        sa.CheckConstraint(
            "link_status IN ('unlinked', 'linked', 'suggested')",
            name="ck_external_identity_link_status",
        ),
        sa.CheckConstraint(
            "(link_status = 'linked') = (user_id IS NOT NULL)",
            name="ck_external_identity_linked_user",
        ),
        sa.CheckConstraint(
            "link_confidence IS NULL OR (link_confidence >= 0 AND link_confidence <= 1)",
            name="ck_external_identity_confidence",
        ),
    )
    op.create_index(
        "idx_external_identities_user",
        "external_identities",
        ["organization_id", "user_id"],
    )
    op.create_index(
        "idx_external_identities_status",
        "external_identities",
        ["organization_id", "link_status"],
    )

    # ========================================================================
    # LINK_SUGGESTIONS table
    # ========================================================================
    op.create_table(
        "link_suggestions",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("organization_id", sa.UUID(), nullable=False),
        sa.Column("external_identity_id", sa.UUID(), nullable=False),
        sa.Column("suggested_user_id", sa.UUID(), nullable=False),
        sa.Column("match_method", sa.String(20), nullable=False),
        sa.Column("confidence_score", sa.Float(), nullable=False),
        sa.Column(
            "match_details",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("reviewed_by", sa.String(255), nullable=True),
        sa.Column("reviewed_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["external_identity_id"], ["external_identities.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "external_identity_id", "suggested_user_id", name="uq_link_suggestion_pair"
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected', 'expired')",
            name="ck_link_suggestion_status",
        ),
        sa.CheckConstraint(
            "confidence_score >= 0 AND confidence_score <= 1",
            name="ck_link_suggestion_confidence",
        ),
    )
    op.create_index(
        "idx_link_suggestions_pending",
        "link_suggestions",
        ["organization_id", "status", "expires_at"],
    )
    op.create_index(
        "idx_link_suggestions_user",
        "link_suggestions",
        ["organization_id", "suggested_user_id"],
    )

    # ========================================================================
    # LINK_AUDITS table (append-only)
    # ========================================================================
    op.create_table(
        "link_audits",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("seq", sa.BigInteger(), sa.Identity(always=True), nullable=False),
        sa.Column("organization_id", sa.UUID(), nullable=False),
        sa.Column("external_identity_id", sa.UUID(), nullable=False),
        sa.Column("suggestion_id", sa.UUID(), nullable=True),
        sa.Column("action", sa.String(30), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=True),
        sa.Column("previous_user_id", sa.UUID(), nullable=True),
        sa.Column("link_method", sa.String(20), nullable=True),
        sa.Column("confidence", sa.Numeric(5, 4), nullable=True),
        sa.Column("performed_by", sa.String(255), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.ForeignKeyConstraint(
            ["external_identity_id"], ["external_identities.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_link_audits_identity",
        "link_audits",
        ["external_identity_id", "created_at", "seq"],
    )
    op.create_index(
        "idx_link_audits_org_created",
        "link_audits",
        ["organization_id", "created_at"],
    )

    # ========================================================================
    # IDENTITY_SETTINGS table (one row per organization)
    # ========================================================================
    op.create_table(
        "identity_settings",
        sa.Column("organization_id", sa.UUID(), nullable=False),
        sa.Column(
            "auto_link_on_email", sa.Boolean(), nullable=False, server_default="true"
        ),
        sa.Column(
            "auto_link_threshold", sa.Float(), nullable=False, server_default="0.95"
        ),
        sa.Column(
            "suggestion_threshold", sa.Float(), nullable=False, server_default="0.85"
        ),
        sa.Column(
            "suggestion_expiry_days", sa.Integer(), nullable=False, server_default="30"
        ),
        sa.Column(
            "allow_user_self_link", sa.Boolean(), nullable=False, server_default="true"
        ),
        sa.Column(
            "allow_user_self_unlink",
            sa.Boolean(),
            nullable=False,
            server_default="true",
        ),
        sa.Column(
            "require_admin_approval",
            sa.Boolean(),
            nullable=False,
            server_default="false",
        ),
        sa.Column(
            "audit_retention_days", sa.Integer(), nullable=False, server_default="365"
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("organization_id"),
        sa.CheckConstraint(
            "suggestion_threshold <= auto_link_threshold",
            name="ck_identity_settings_threshold_order",
        ),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("identity_settings")
    op.drop_index("idx_link_audits_org_created", table_name="link_audits")
    op.drop_index("idx_link_audits_identity", table_name="link_audits")
    op.drop_table("link_audits")
    op.drop_index("idx_link_suggestions_user", table_name="link_suggestions")
    op.drop_index("idx_link_suggestions_pending", table_name="link_suggestions")
    op.drop_table("link_suggestions")
    op.drop_index("idx_external_identities_status", table_name="external_identities")
    op.drop_index("idx_external_identities_user", table_name="external_identities")
    op.drop_table("external_identities")
    op.drop_index("idx_organization_members_email", table_name="organization_members")
    op.drop_table("organization_members")
