"""Back office: employees, company settings, job applications, user blocking

Revision ID: 8d2c4e6a1f37
Revises: 3b7e1f0a9c42
Create Date: 2026-10-19 16:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "8d2c4e6a1f37"
down_revision: Union[str, None] = "3b7e1f0a9c42"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

job_position = sa.Enum(
    "CHEF", "HELPER", "HOUSE_KEEPING", "MANAGER", "SALES_PERSON", "MARKETING_EXECUTIVE",
    name="jobposition",
)
experience_range = sa.Enum(
    "UNDER_ONE", "ONE_TO_THREE", "THREE_TO_FIVE", "FIVE_TO_TEN", "OVER_TEN",
    name="experiencerange",
)
notice_period = sa.Enum(
    "IMMEDIATE", "FIFTEEN_DAYS", "ONE_MONTH", "TWO_MONTHS", "THREE_MONTHS", "LONGER",
    name="noticeperiod",
)
application_status = sa.Enum(
    "APPLIED", "UNDER_REVIEW", "SHORTLISTED", "REJECTED", "SELECTED",
    name="applicationstatus",
)


def upgrade() -> None:
    op.add_column(
        "users",
        sa.Column("is_blocked", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.alter_column("users", "is_blocked", server_default=None)

    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=15), nullable=False),
        sa.Column("whatsapp", sa.String(length=15), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("avatar_url", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index(op.f("ix_employees_id"), "employees", ["id"], unique=False)
    op.create_index(op.f("ix_employees_name"), "employees", ["name"], unique=False)
    op.create_index(op.f("ix_employees_phone"), "employees", ["phone"], unique=True)
    op.create_index(op.f("ix_employees_whatsapp"), "employees", ["whatsapp"], unique=True)

    op.create_table(
        "company_settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=15), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("logo_url", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_company_settings_id"), "company_settings", ["id"], unique=False)

    op.create_table(
        "job_applications",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=15), nullable=False),
        sa.Column("position", job_position, nullable=False),
        sa.Column("experience", experience_range, nullable=False),
        sa.Column("qualification", sa.String(length=200), nullable=False),
        sa.Column("current_location", sa.String(length=100), nullable=False),
        sa.Column("expected_salary", sa.String(length=50), nullable=False),
        sa.Column("notice_period", notice_period, nullable=False),
        sa.Column("resume_url", sa.String(length=500), nullable=False),
        sa.Column("cover_letter", sa.Text(), nullable=True),
        sa.Column("status", application_status, nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(), nullable=True),
        sa.Column("reviewed_by", sa.Integer(), nullable=True),
        sa.Column("applied_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["reviewed_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_job_applications_id"), "job_applications", ["id"], unique=False)
    op.create_index(op.f("ix_job_applications_email"), "job_applications", ["email"], unique=False)
    op.create_index(op.f("ix_job_applications_position"), "job_applications", ["position"], unique=False)
    op.create_index(op.f("ix_job_applications_status"), "job_applications", ["status"], unique=False)
    op.create_index(
        "ix_job_applications_applied_at",
        "job_applications",
        [sa.text("applied_at DESC")],
        unique=False,
    )


def downgrade() -> None:
    op.drop_table("job_applications")
    op.drop_table("company_settings")
    op.drop_table("employees")
    op.drop_column("users", "is_blocked")

    bind = op.get_bind()
    for enum_type in (application_status, notice_period, experience_range, job_position):
        enum_type.drop(bind, checkfirst=True)
