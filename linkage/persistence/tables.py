"""SQLAlchemy table definitions for the identity-linking engine.

They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Identity,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# ORGANIZATION MEMBERS TABLE (projection owned by the surrounding system)
# ============================================================================
organization_members_table = Table(
    "organization_members",
    metadata,
    Column("organization_id", UUID, primary_key=True),
    Column("user_id", UUID, primary_key=True),
    Column("email", String(255), nullable=True),
    Column("display_name", String(255), nullable=True),
)

Index(
    "idx_organization_members_email",
    organization_members_table.c.organization_id,
    organization_members_table.c.email,
)

# ============================================================================
# EXTERNAL IDENTITIES TABLE
# ============================================================================
external_identities_table = Table(
    "external_identities",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("organization_id", UUID, nullable=False),
    Column("provider", String(50), nullable=False),  # 'slack', 'google', 'notion'
    Column("provider_user_id", String(255), nullable=False),
    Column("provider_team_id", String(255), nullable=True),
    Column("email", String(255), nullable=True),
    Column("display_name", String(255), nullable=True),
    Column("real_name", String(255), nullable=True),
    Column("avatar_url", Text, nullable=True),
    Column("metadata", JSONB, nullable=False, server_default="{}"),
    Column("user_id", UUID, nullable=True),
    Column("link_status", String(20), nullable=False, server_default="unlinked"),
    Column("link_method", String(20), nullable=True),
    Column("link_confidence", Numeric(3, 2), nullable=True),
    Column("linked_at", TIMESTAMP(timezone=True), nullable=True),
    Column("linked_by", String(255), nullable=True),
    Column(
        "last_synced_at",
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default="NOW()",
    ),
    Column("sync_error", Text, nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint(
        "organization_id",
        "provider",
        "provider_user_id",
        name="uq_external_identity_provider",
    ),
    CheckConstraint(
        "link_status IN ('unlinked', 'linked', 'suggested')",
        name="ck_external_identity_link_status",
    ),
    CheckConstraint(
        "(link_status = 'linked') = (user_id IS NOT NULL)",
        name="ck_external_identity_linked_user",
    ),
    CheckConstraint(
        "link_confidence IS NULL OR (link_confidence >= 0 AND link_confidence <= 1)",
        name="ck_external_identity_confidence",
    ),
)

Index(
    "idx_external_identities_user",
    external_identities_table.c.organization_id,
    external_identities_table.c.user_id,
)
Index(
    "idx_external_identities_status",
    external_identities_table.c.organization_id,
    external_identities_table.c.link_status,
)

# ============================================================================
# LINK SUGGESTIONS TABLE
# ============================================================================
link_suggestions_table = Table(
    "link_suggestions",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("organization_id", UUID, nullable=False),
    Column(
        "external_identity_id",
        UUID,
        ForeignKey("external_identities.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("suggested_user_id", UUID, nullable=False),
    Column("match_method", String(20), nullable=False),
    Column("confidence_score", Float, nullable=False),
    Column("match_details", JSONB, nullable=False, server_default="{}"),
    Column("status", String(20), nullable=False, server_default="pending"),
    Column("reviewed_by", String(255), nullable=True),
    Column("reviewed_at", TIMESTAMP(timezone=True), nullable=True),
    Column("rejection_reason", Text, nullable=True),
    Column("expires_at", TIMESTAMP(timezone=True), nullable=False),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint(
        "external_identity_id", "suggested_user_id", name="uq_link_suggestion_pair"
    ),
    CheckConstraint(
        "status IN ('pending', 'accepted', 'rejected', 'expired')",
        name="ck_link_suggestion_status",
    ),
    CheckConstraint(
        "confidence_score >= 0 AND confidence_score <= 1",
        name="ck_link_suggestion_confidence",
    ),
)

Index(
    "idx_link_suggestions_pending",
    link_suggestions_table.c.organization_id,
    link_suggestions_table.c.status,
    link_suggestions_table.c.expires_at,
)
Index(
    "idx_link_suggestions_user",
    link_suggestions_table.c.organization_id,
    link_suggestions_table.c.suggested_user_id,
)

# ============================================================================
# LINK AUDITS TABLE (append-only)
# ============================================================================
link_audits_table = Table(
    "link_audits",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    # Insertion order; breaks ties between entries written at the same instant
    Column("seq", BigInteger, Identity(always=True), nullable=False),
    Column("organization_id", UUID, nullable=False),
    Column(
        "external_identity_id",
        UUID,
        ForeignKey("external_identities.id", ondelete="CASCADE"),
        nullable=False,
    ),
    # No foreign key; suggestion cleanup never touches audit rows
    Column("suggestion_id", UUID, nullable=True),
    Column("action", String(30), nullable=False),
    Column("user_id", UUID, nullable=True),
    Column("previous_user_id", UUID, nullable=True),
    Column("link_method", String(20), nullable=True),
    Column("confidence", Numeric(5, 4), nullable=True),
    Column("performed_by", String(255), nullable=True),
    Column("reason", Text, nullable=True),
    Column("metadata", JSONB, nullable=False, server_default="{}"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index(
    "idx_link_audits_identity",
    link_audits_table.c.external_identity_id,
    link_audits_table.c.created_at,
    link_audits_table.c.seq,
)
Index(
    "idx_link_audits_org_created",
    link_audits_table.c.organization_id,
    link_audits_table.c.created_at,
)

# ============================================================================
# IDENTITY SETTINGS TABLE (one row per organization)
# ============================================================================
identity_settings_table = Table(
    "identity_settings",
    metadata,
    Column("organization_id", UUID, primary_key=True),
    Column("auto_link_on_email", Boolean, nullable=False, server_default="true"),
    Column("auto_link_threshold", Float, nullable=False, server_default="0.95"),
    Column("suggestion_threshold", Float, nullable=False, server_default="0.85"),
    Column("suggestion_expiry_days", Integer, nullable=False, server_default="30"),
    Column("allow_user_self_link", Boolean, nullable=False, server_default="true"),
    Column("allow_user_self_unlink", Boolean, nullable=False, server_default="true"),
    Column("require_admin_approval", Boolean, nullable=False, server_default="false"),
    Column("audit_retention_days", Integer, nullable=False, server_default="365"),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    CheckConstraint(
        "suggestion_threshold <= auto_link_threshold",
        name="ck_identity_settings_threshold_order",
    ),
)
