"""create campuses, users, profiles, roles, otp + rate limit, responses

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision      = "001"
down_revision = None
branch_labels = None
depends_on    = None


def upgrade() -> None:
    op.create_table(
        "campuses",
        sa.Column("id",              sa.String(64),  primary_key=True),
        sa.Column("name",            sa.String(120), nullable=False, unique=True),
        sa.Column("location",        sa.String(120), nullable=False, server_default=""),
        sa.Column("allowed_domains", sa.JSON(),      nullable=False),
    )

    op.create_table(
        "users",
        sa.Column("id",              sa.String(36),              primary_key=True),
        sa.Column("email",           sa.String(320),             nullable=False),
        sa.Column("last_sign_in_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at",      sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "profiles",
        sa.Column("id",         sa.Integer(),               primary_key=True, autoincrement=True),
        sa.Column("user_id",    sa.String(36),              sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("email",      sa.String(320),             nullable=False),
        sa.Column("campus_id",  sa.String(64),              sa.ForeignKey("campuses.id", ondelete="SET NULL"), nullable=True),
        sa.Column("verified",   sa.Boolean(),               nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_profiles_user_id",   "profiles", ["user_id"],   unique=True)
    op.create_index("ix_profiles_campus_id", "profiles", ["campus_id"], unique=False)

    user_role_enum = sa.Enum("admin", "student", name="user_role_enum")
    op.create_table(
        "user_roles",
        sa.Column("id",      sa.Integer(),  primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role",    user_role_enum, nullable=False),
        sa.UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
    )
    op.create_index("ix_user_roles_user_id", "user_roles", ["user_id"], unique=False)

    op.create_table(
        "otp_codes",
        sa.Column("id",         sa.Integer(),               primary_key=True, autoincrement=True),
        sa.Column("email",      sa.String(320),             nullable=False),
        sa.Column("code",       sa.String(6),               nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used",       sa.Boolean(),               nullable=False, server_default="false"),
        sa.Column("attempts",   sa.Integer(),               nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_otp_codes_email",      "otp_codes", ["email"],         unique=False)
    op.create_index("ix_otp_codes_email_used", "otp_codes", ["email", "used"], unique=False)

    op.create_table(
        "otp_rate_limits",
        sa.Column("id",            sa.Integer(),               primary_key=True, autoincrement=True),
        sa.Column("email",         sa.String(340),             nullable=False),
        sa.Column("request_count", sa.Integer(),               nullable=False, server_default="1"),
        sa.Column("window_start",  sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_otp_rate_limits_email",        "otp_rate_limits", ["email"],        unique=False)
    op.create_index("ix_otp_rate_limits_window_start", "otp_rate_limits", ["window_start"], unique=False)

    op.create_table(
        "responses",
        sa.Column("id",                    sa.Integer(),               primary_key=True, autoincrement=True),
        sa.Column("user_id",               sa.String(36),              sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("campus_id",             sa.String(64),              sa.ForeignKey("campuses.id", ondelete="SET NULL"), nullable=True),
        sa.Column("questionnaire_version", sa.String(64),              nullable=False),
        sa.Column("answers_encrypted",     sa.Text(),                  nullable=False),
        sa.Column("responses_hash",        sa.String(64),              nullable=False),
        sa.Column("photo_encrypted",       sa.Text(),                  nullable=True),
        sa.Column("created_at",            sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at",            sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "questionnaire_version", name="uq_responses_user_version"),
    )
    op.create_index("ix_responses_user_id",    "responses", ["user_id"],    unique=False)
    op.create_index("ix_responses_campus_id",  "responses", ["campus_id"],  unique=False)
    op.create_index("ix_responses_created_at", "responses", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_table("responses")
    op.drop_table("otp_rate_limits")
    op.drop_table("otp_codes")
    op.drop_table("user_roles")
    sa.Enum(name="user_role_enum").drop(op.get_bind(), checkfirst=True)
    op.drop_table("profiles")
    op.drop_table("users")
    op.drop_table("campuses")
