"""Read-only reporting queries against the local admin database.

Used when the HR platform API is unreachable and by the admin dashboard routes.
"""

from datetime import date, datetime, time, timedelta

from sqlalchemy import Date, DateTime, bindparam, text

from shared.helper.HelperConfig import HelperConfig
from shared.store.DatabaseManager import DatabaseManager, utcnow


class FallbackDataStore:
    def __init__(self, helper_config: HelperConfig, database: DatabaseManager):
        self.logging = helper_config.get_logger()
        self._db = database

    async def do_fetch_pending_payments(self, limit: int = 5, statuses: tuple[str, ...] = ("pending",)) -> list[dict]:
        """Payment schedules in one of ``statuses``, earliest due date first."""
        async with self._db.get_session() as session:
            result = await session.execute(
                text(
                    "SELECT schedule_id, payment_period, employee_count, total_amount, currency, due_date, status "
                    "FROM payment_schedules WHERE status IN :statuses ORDER BY due_date ASC LIMIT :limit"
                )
                .bindparams(bindparam("statuses", expanding=True))
                .columns(due_date=Date),
                {"limit": limit, "statuses": list(statuses)},
            )
            return [dict(row) for row in result.mappings().all()]

    async def do_fetch_payment_overview(self, today: date | None = None) -> dict:
        """Overdue count/amount and the number of pending payments due within 7 days."""
        today = today or date.today()
        async with self._db.get_session() as session:
            overdue = (
                await session.execute(
                    text(
                        "SELECT COUNT(*) AS overdue_count, COALESCE(SUM(total_amount), 0) AS overdue_amount "
                        "FROM payment_schedules WHERE due_date < :today AND status = 'pending'"
                    ).bindparams(bindparam("today", type_=Date)),
                    {"today": today},
                )
            ).mappings().one()
            upcoming = (
                await session.execute(
                    text("SELECT COUNT(*) AS upcoming_payments FROM payment_schedules WHERE status = 'pending' AND due_date <= :limit").bindparams(
                        bindparam("limit", type_=Date)
                    ),
                    {"limit": today + timedelta(days=7)},
                )
            ).mappings().one()
        return {
            "overdue_count": int(overdue["overdue_count"] or 0),
            "overdue_amount": float(overdue["overdue_amount"] or 0),
            "upcoming_payments": int(upcoming["upcoming_payments"] or 0),
        }

    async def do_fetch_employee_overview(self) -> dict:
        async with self._db.get_session() as session:
            row = (
                await session.execute(
                    text(
                        "SELECT COUNT(*) AS total_employees, "
                        "SUM(CASE WHEN employment_status = 'active' THEN 1 ELSE 0 END) AS active_employees, "
                        "COUNT(DISTINCT location) AS locations "
                        "FROM platform_employees"
                    )
                )
            ).mappings().one()
        return {
            "total_employees": int(row["total_employees"] or 0),
            "active_employees": int(row["active_employees"] or 0),
            "locations": int(row["locations"] or 0),
        }

    async def do_fetch_employer_overview(self) -> dict:
        async with self._db.get_session() as session:
            row = (
                await session.execute(
                    text(
                        "SELECT COUNT(*) AS total_employers, "
                        "SUM(CASE WHEN verification_status = 'verified' THEN 1 ELSE 0 END) AS verified_employers, "
                        "SUM(CASE WHEN verification_status = 'pending' THEN 1 ELSE 0 END) AS pending_verifications, "
                        "COALESCE(SUM(job_postings_count), 0) AS total_job_postings "
                        "FROM platform_employers"
                    )
                )
            ).mappings().one()
        return {
            "total_employers": int(row["total_employers"] or 0),
            "verified_employers": int(row["verified_employers"] or 0),
            "pending_verifications": int(row["pending_verifications"] or 0),
            "total_job_postings": int(row["total_job_postings"] or 0),
        }

    async def do_fetch_payment_reminders(self, today: date | None = None, limit: int = 10) -> dict:
        """Open schedules (pending or processing) with their days until due, plus the overdue summary."""
        today = today or date.today()
        schedules = await self.do_fetch_pending_payments(limit=limit, statuses=("pending", "processing"))
        for schedule in schedules:
            schedule["days_until_due"] = (schedule["due_date"] - today).days if schedule["due_date"] else None
        overview = await self.do_fetch_payment_overview(today=today)
        return {
            "upcoming_payments": schedules,
            "overdue_summary": {"overdue_count": overview["overdue_count"], "overdue_amount": overview["overdue_amount"]},
            "total_pending": len(schedules),
        }

    async def do_fetch_local_dashboard(self, today: date | None = None) -> dict:
        """Employee and employer overview, today's admin sessions (UTC day) and the open task counts."""
        today = today or date.today()
        employers = await self.do_fetch_employer_overview()
        payments = await self.do_fetch_payment_overview(today=today)
        async with self._db.get_session() as session:
            sessions_today = (
                await session.execute(
                    text("SELECT COUNT(*) FROM chat_sessions WHERE bot_type = 'admin' AND created_at >= :start").bindparams(
                        bindparam("start", type_=DateTime)
                    ),
                    {"start": datetime.combine(utcnow().date(), time.min)},
                )
            ).scalar_one()
            high_priority_emails = (
                await session.execute(
                    text("SELECT COUNT(*) FROM email_processing WHERE processing_status = 'pending' AND priority = 'high'")
                )
            ).scalar_one()
        return {
            "overview": {"employees": await self.do_fetch_employee_overview(), "employers": employers},
            "activity": {"admin_sessions_today": int(sessions_today or 0)},
            "pending_tasks": {
                "upcoming_payments": payments["upcoming_payments"],
                "pending_verifications": employers["pending_verifications"],
                "high_priority_emails": int(high_priority_emails or 0),
            },
            "last_updated": utcnow().isoformat(),
        }

    async def do_fetch_email_summary(self, hours: int = 24) -> dict:
        """Processed mail of the last ``hours`` grouped by category, priority and status,
        plus the pending backlog per priority and the pending high/medium items."""
        since = utcnow() - timedelta(hours=hours)
        async with self._db.get_session() as session:
            summary = (
                await session.execute(
                    text(
                        "SELECT email_category, priority, processing_status, COUNT(*) AS count "
                        "FROM email_processing WHERE created_at >= :since "
                        "GROUP BY email_category, priority, processing_status "
                        "ORDER BY priority DESC, count DESC"
                    ).bindparams(bindparam("since", type_=DateTime)),
                    {"since": since},
                )
            ).mappings().all()
            breakdown = (
                await session.execute(
                    text("SELECT priority, COUNT(*) AS count FROM email_processing WHERE processing_status = 'pending' GROUP BY priority")
                )
            ).mappings().all()
            pending = (
                await session.execute(
                    text(
                        "SELECT email_id, email_subject, sender_email, email_category, priority, content_summary "
                        "FROM email_processing WHERE processing_status = 'pending' AND priority IN ('high', 'medium') "
                        "ORDER BY priority DESC, created_at ASC LIMIT 10"
                    )
                )
            ).mappings().all()
        return {
            "summary": [dict(row) for row in summary],
            "priority_breakdown": {row["priority"]: int(row["count"]) for row in breakdown},
            "pending_emails": [dict(row) for row in pending],
        }

    async def do_fetch_analytics(self, period_type: str = "monthly", period_value: str | None = None) -> dict:
        """Metrics for one period plus the trend of the headline metrics over all periods of that type."""
        period_value = period_value or date.today().strftime("%Y-%m")
        async with self._db.get_session() as session:
            metrics = (
                await session.execute(
                    text(
                        "SELECT metric_name, metric_value, metric_type, category FROM platform_analytics "
                        "WHERE period_type = :period_type AND period_value = :period_value ORDER BY category, metric_name"
                    ),
                    {"period_type": period_type, "period_value": period_value},
                )
            ).mappings().all()
            trends = (
                await session.execute(
                    text(
                        "SELECT metric_name, metric_value, period_value FROM platform_analytics "
                        "WHERE period_type = :period_type "
                        "AND metric_name IN ('total_active_users', 'job_applications', 'successful_hires') "
                        "ORDER BY period_value DESC LIMIT 12"
                    ),
                    {"period_type": period_type},
                )
            ).mappings().all()
        return {
            "period_type": period_type,
            "period_value": period_value,
            "metrics": [dict(row) for row in metrics],
            "trends": [dict(row) for row in trends],
        }
