"""Initial schema: players, characters, games and single-use tokens."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

AUTH_PROVIDER = sa.Enum("LOCAL", "GOOGLE", name="auth_provider")
GAME_STATUS = sa.Enum("ACTIVE", "WON", "LOST", name="game_status")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def _token_table(name: str, expires_index: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("token_hash", sa.String(length=128), nullable=False, unique=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(expires_index, name, ["expires_at"])


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("username", sa.String(length=50), nullable=False, unique=True),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column(
            "email_verified", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "auth_provider", AUTH_PROVIDER, nullable=False, server_default="LOCAL"
        ),
        *_timestamps(),
    )

    op.create_table(
        "characters",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("anime", sa.String(length=200), nullable=False),
        sa.Column("gender", sa.String(length=20), nullable=True),
        sa.Column("age", sa.String(length=50), nullable=True),
        sa.Column("hair_color", sa.String(length=50), nullable=True),
        sa.Column("eye_color", sa.String(length=50), nullable=True),
        sa.Column("occupation", sa.String(length=200), nullable=True),
        sa.Column("personality", sa.Text(), nullable=True),
        sa.Column("powers_abilities", sa.Text(), nullable=True),
        sa.Column("backstory", sa.Text(), nullable=True),
        sa.Column("notable_quotes", sa.Text(), nullable=True),
        sa.Column("relationships", sa.Text(), nullable=True),
        sa.Column("appearance_description", sa.Text(), nullable=True),
        sa.Column("character_type", sa.String(length=50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_characters_active", "characters", ["is_active"])

    op.create_table(
        "games",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "character_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("characters.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("status", GAME_STATUS, nullable=False, server_default="ACTIVE"),
        sa.Column("questions_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "guessed_correctly", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("final_guess", sa.String(length=100), nullable=True),
    )
    op.create_index("ix_games_user", "games", ["user_id"])
    op.create_index(
        "ux_games_user_active",
        "games",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("status = 'ACTIVE'"),
        sqlite_where=sa.text("status = 'ACTIVE'"),
    )

    op.create_table(
        "questions",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "game_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("games.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("question_text", sa.Text(), nullable=False),
        sa.Column("answer_text", sa.Text(), nullable=False),
        sa.Column("asked_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("game_id", "position", name="uq_questions_game_position"),
    )

    _token_table("email_verification_tokens", "ix_email_verification_expires")
    _token_table("password_reset_tokens", "ix_password_reset_expires")


def downgrade() -> None:
    op.drop_index("ix_password_reset_expires", table_name="password_reset_tokens")
    op.drop_table("password_reset_tokens")
    op.drop_index("ix_email_verification_expires", table_name="email_verification_tokens")
    op.drop_table("email_verification_tokens")
    op.drop_table("questions")
    op.drop_index("ux_games_user_active", table_name="games")
    op.drop_index("ix_games_user", table_name="games")
    op.drop_table("games")
    op.drop_index("ix_characters_active", table_name="characters")
    op.drop_table("characters")
    op.drop_table("users")
    GAME_STATUS.drop(op.get_bind(), checkfirst=True)
    AUTH_PROVIDER.drop(op.get_bind(), checkfirst=True)
