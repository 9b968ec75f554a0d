"""
Operational tables the pipeline reads and writes in tests.

These are not ORM-mapped; the pipeline addresses them with SQLAlchemy Core
by name. Destination tables carry the columns materialization produces;
reference tables carry the columns lookups match and filter on.
"""

import sqlalchemy as sa


site_metadata = sa.MetaData()


def _id() -> sa.Column:
    return sa.Column("id", sa.Integer, primary_key=True, autoincrement=True)


def _audit() -> list[sa.Column]:
    return [sa.Column("created_at", sa.String), sa.Column("updated_at", sa.String)]


laborers_table = sa.Table(
    "laborers",
    site_metadata,
    _id(),
    sa.Column("name", sa.String, nullable=False),
    sa.Column("phone", sa.String),
    sa.Column("category_id", sa.String),
    sa.Column("role_id", sa.String),
    sa.Column("daily_rate", sa.Float),
    sa.Column("employment_type", sa.String),
    sa.Column("team_id", sa.String),
    sa.Column("address", sa.String),
    sa.Column("emergency_contact_name", sa.String),
    sa.Column("emergency_contact_phone", sa.String),
    sa.Column("status", sa.String, nullable=False, server_default="active"),
    *_audit(),
    sa.CheckConstraint("daily_rate IS NULL OR daily_rate >= 0", name="ck_laborers_daily_rate"),
)

daily_attendance_table = sa.Table(
    "daily_attendance",
    site_metadata,
    _id(),
    sa.Column("laborer_id", sa.String, nullable=False),
    sa.Column("date", sa.String, nullable=False),
    sa.Column("site_id", sa.String, nullable=False),
    sa.Column("work_days", sa.String),
    sa.Column("daily_rate_applied", sa.Float),
    sa.Column("daily_earnings", sa.Float),
    sa.Column("in_time", sa.String),
    sa.Column("out_time", sa.String),
    sa.Column("section_id", sa.String),
    sa.Column("team_id", sa.String),
    sa.Column("work_description", sa.String),
    sa.Column("snacks_amount", sa.Float),
    sa.Column("entered_by", sa.String),
    sa.Column("recorded_by_user_id", sa.String),
    *_audit(),
)

expenses_table = sa.Table(
    "expenses",
    site_metadata,
    _id(),
    sa.Column("site_id", sa.String, nullable=False),
    sa.Column("date", sa.String, nullable=False),
    sa.Column("module", sa.String),
    sa.Column("category_id", sa.String, nullable=False),
    sa.Column("amount", sa.Float, nullable=False),
    sa.Column("description", sa.String),
    sa.Column("vendor_name", sa.String),
    sa.Column("vendor_contact", sa.String),
    sa.Column("payment_mode", sa.String),
    sa.Column("reference_number", sa.String),
    sa.Column("is_cleared", sa.Boolean),
    sa.Column("notes", sa.String),
    sa.Column("entered_by", sa.String),
    sa.Column("entered_by_user_id", sa.String),
    *_audit(),
)

labor_categories_table = sa.Table(
    "labor_categories",
    site_metadata,
    _id(),
    sa.Column("name", sa.String, nullable=False),
    sa.Column("is_active", sa.Boolean, nullable=False, default=True),
)

labor_roles_table = sa.Table(
    "labor_roles",
    site_metadata,
    _id(),
    sa.Column("name", sa.String, nullable=False),
    sa.Column("is_active", sa.Boolean, nullable=False, default=True),
)

teams_table = sa.Table(
    "teams",
    site_metadata,
    _id(),
    sa.Column("name", sa.String, nullable=False),
    sa.Column("status", sa.String, nullable=False, default="active"),
)

building_sections_table = sa.Table(
    "building_sections",
    site_metadata,
    _id(),
    sa.Column("name", sa.String, nullable=False),
    sa.Column("site_id", sa.String, nullable=False),
)

tea_shop_accounts_table = sa.Table(
    "tea_shop_accounts",
    site_metadata,
    _id(),
    sa.Column("shop_name", sa.String, nullable=False),
    sa.Column("site_id", sa.String, nullable=False),
    sa.Column("is_active", sa.Boolean, nullable=False, default=True),
)

expense_categories_table = sa.Table(
    "expense_categories",
    site_metadata,
    _id(),
    sa.Column("name", sa.String, nullable=False),
    sa.Column("is_active", sa.Boolean, nullable=False, default=True),
)


