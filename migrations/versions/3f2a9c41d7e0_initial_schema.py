"""initial schema

Revision ID: 3f2a9c41d7e0
Revises:
Create Date: 2026-10-19 09:12:40.511208

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3f2a9c41d7e0"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _enum(name: str, *values: str, length: int = 16) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False, create_constraint=True, length=length)


def upgrade() -> None:
    """Create users, relationships, chat messages, favourites and the activity log."""
    op.create_table(
        "user_account",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("fname", sa.String(length=100), nullable=False),
        sa.Column("lname", sa.String(length=100), nullable=False),
        sa.Column("kunya", sa.String(length=100), nullable=True),
        sa.Column("gender", _enum("gender_enum", "male", "female"), nullable=False),
        sa.Column("dob", sa.Date(), nullable=True),
        sa.Column("plan", _enum("plan_enum", "freemium", "premium", "pro"), nullable=False),
        sa.Column("status", _enum("userstatus_enum", "active", "inactive"), nullable=False),
        sa.Column("hidden", sa.Boolean(), nullable=False),
        sa.Column("nationality", sa.String(length=100), nullable=True),
        sa.Column("country", sa.String(length=100), nullable=True),
        sa.Column("ethnicity", sa.String(length=100), nullable=True),
        sa.Column("build", sa.String(length=100), nullable=True),
        sa.Column("appearance", sa.String(length=100), nullable=True),
        sa.Column("marital_status", sa.String(length=100), nullable=True),
        sa.Column("pattern_of_salaah", sa.String(length=100), nullable=True),
        sa.Column("genotype", sa.String(length=20), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("work_education", sa.Text(), nullable=True),
        sa.Column("profile_pic", sa.Text(), nullable=True),
        sa.Column("last_seen", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
        sa.UniqueConstraint("email"),
    )
    op.create_table(
        "user_favorite",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("favorite_user_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["favorite_user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "favorite_user_id"),
    )
    op.create_table(
        "relationship",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("follower_user_id", sa.Integer(), nullable=False),
        sa.Column("followed_user_id", sa.Integer(), nullable=False),
        sa.Column("user_low_id", sa.Integer(), nullable=False),
        sa.Column("user_high_id", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            _enum("relationshipstatus_enum", "pending", "matched", "rejected"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["follower_user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["followed_user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_low_id", "user_high_id", name="uq_relationship_pair"),
        sa.CheckConstraint("user_low_id < user_high_id", name="ck_relationship_pair_order"),
        sa.CheckConstraint("follower_user_id <> followed_user_id", name="ck_relationship_not_self"),
    )
    op.create_index(
        "ix_relationship_follower_status", "relationship", ["follower_user_id", "status"]
    )
    op.create_index(
        "ix_relationship_followed_status", "relationship", ["followed_user_id", "status"]
    )
    op.create_table(
        "chat_message",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("sender_id", sa.Integer(), nullable=False),
        sa.Column("receiver_id", sa.Integer(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("status", _enum("messagestatus_enum", "UNREAD", "READ"), nullable=False),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["sender_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["receiver_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_chat_message_pair", "chat_message", ["sender_id", "receiver_id", "created"]
    )
    op.create_index(
        "ix_chat_message_receiver_status", "chat_message", ["receiver_id", "status"]
    )
    op.create_table(
        "user_activity_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("receiver_id", sa.Integer(), nullable=False),
        sa.Column(
            "action",
            _enum(
                "activityaction_enum", "FOLLOWED", "ACCEPTED", "REJECTED", "WITHDREW", "VIEWED"
            ),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["receiver_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_user_activity_log_user", "user_activity_log", ["user_id", "created_at"]
    )


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_index("ix_user_activity_log_user", table_name="user_activity_log")
    op.drop_table("user_activity_log")
    op.drop_index("ix_chat_message_receiver_status", table_name="chat_message")
    op.drop_index("ix_chat_message_pair", table_name="chat_message")
    op.drop_table("chat_message")
    op.drop_index("ix_relationship_followed_status", table_name="relationship")
    op.drop_index("ix_relationship_follower_status", table_name="relationship")
    op.drop_table("relationship")
    op.drop_table("user_favorite")
    op.drop_table("user_account")
