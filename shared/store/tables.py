"""Table definitions for the local admin database.

The schema mirrors the platform's reporting tables closely enough for the
fallback queries; it is created with ``DatabaseManager.do_init_schema()`` for
local and test databases.
"""

from sqlalchemy import JSON, Column, Date, DateTime, Float, Integer, MetaData, String, Table, Text

metadata = MetaData()

chat_sessions = Table(
    "chat_sessions",
    metadata,
    Column("session_id", String(64), primary_key=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("bot_type", String(32), nullable=False, default="admin"),
    Column("context", JSON, nullable=False, default=dict),
    Column("created_at", DateTime, nullable=False),
    Column("ended_at", DateTime, nullable=True),
)

chat_messages = Table(
    "chat_messages",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("session_id", String(64), nullable=False, index=True),
    Column("message", Text, nullable=False),
    Column("sender", String(16), nullable=False),
    Column("message_type", String(32), nullable=False, default="text"),
    Column("created_at", DateTime, nullable=False),
)

payment_schedules = Table(
    "payment_schedules",
    metadata,
    Column("schedule_id", Integer, primary_key=True, autoincrement=True),
    Column("payment_period", String(64), nullable=False),
    Column("employee_count", Integer, nullable=False, default=0),
    Column("total_amount", Float, nullable=False, default=0),
    Column("currency", String(8), nullable=False, default="RWF"),
    Column("due_date", Date, nullable=False),
    Column("status", String(16), nullable=False, default="pending"),
)

platform_employees = Table(
    "platform_employees",
    metadata,
    Column("employee_id", Integer, primary_key=True, autoincrement=True),
    Column("full_name", String(128)),
    Column("email", String(128)),
    Column("location", String(64)),
    Column("department", String(64)),
    Column("position", String(64)),
    Column("employment_status", String(16), default="active"),
    Column("hire_date", Date),
)

platform_employers = Table(
    "platform_employers",
    metadata,
    Column("employer_id", Integer, primary_key=True, autoincrement=True),
    Column("company_name", String(128)),
    Column("email", String(128)),
    Column("location", String(64)),
    Column("industry", String(64)),
    Column("verification_status", String(16), default="pending"),
    Column("job_postings_count", Integer, default=0),
    Column("created_at", DateTime),
)

email_processing = Table(
    "email_processing",
    metadata,
    Column("email_id", Integer, primary_key=True, autoincrement=True),
    Column("email_subject", String(256)),
    Column("sender_email", String(128)),
    Column("email_category", String(64)),
    Column("priority", String(16), default="medium"),
    Column("processing_status", String(16), default="pending"),
    Column("content_summary", Text),
    Column("created_at", DateTime, nullable=False),
)

platform_analytics = Table(
    "platform_analytics",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("metric_name", String(64), nullable=False),
    Column("metric_value", Float, nullable=False, default=0),
    Column("metric_type", String(32)),
    Column("category", String(64)),
    Column("period_type", String(16), nullable=False),
    Column("period_value", String(32), nullable=False),
)
