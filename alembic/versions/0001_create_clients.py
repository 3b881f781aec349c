"""create clients and alternative contacts

Revision ID: 0001_create_clients
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_create_clients"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("province", sa.String(), nullable=True),
        sa.Column("postal_code", sa.String(length=32), nullable=True),
        sa.Column("country", sa.String(), nullable=True),
        sa.Column("dial_code_1", sa.String(length=8), nullable=True),
        sa.Column("phone_number_1", sa.String(length=32), nullable=False),
        sa.Column("dial_code_2", sa.String(length=8), nullable=True),
        sa.Column("phone_number_2", sa.String(length=32), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("sin_number", sa.String(length=32), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_clients_id", "clients", ["id"], unique=False)
    op.create_index("ix_clients_name", "clients", ["name"], unique=False)
    op.create_index("ix_clients_email", "clients", ["email"], unique=False)
    op.create_index("ix_clients_sin_number", "clients", ["sin_number"], unique=False)
    op.create_index("ix_clients_deleted", "clients", ["deleted"], unique=False)
    op.create_index(
        "uq_clients_email_sin_active",
        "clients",
        ["email", "sin_number"],
        unique=True,
        sqlite_where=sa.text("deleted = 0"),
        postgresql_where=sa.text("deleted = false"),
    )

    op.create_table(
        "alternative_contacts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("dial_code", sa.String(length=8), nullable=True),
        sa.Column("phone_number", sa.String(length=32), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_alternative_contacts_id", "alternative_contacts", ["id"], unique=False)
    op.create_index("ix_alternative_contacts_client_id", "alternative_contacts", ["client_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_alternative_contacts_client_id", table_name="alternative_contacts")
    op.drop_index("ix_alternative_contacts_id", table_name="alternative_contacts")
    op.drop_table("alternative_contacts")
    op.drop_index("uq_clients_email_sin_active", table_name="clients")
    op.drop_index("ix_clients_deleted", table_name="clients")
    op.drop_index("ix_clients_sin_number", table_name="clients")
    op.drop_index("ix_clients_email", table_name="clients")
    op.drop_index("ix_clients_name", table_name="clients")
    op.drop_index("ix_clients_id", table_name="clients")
    op.drop_table("clients")
