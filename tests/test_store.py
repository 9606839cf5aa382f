import asyncio
from datetime import date, timedelta

import pytest
from sqlalchemy import insert

from services.admin_chat.ChatSessionService import WELCOME_MESSAGE, ChatSessionService, SessionNotFoundError
from services.admin_chat.MessageRouter import build_admin_router
from shared.clients.mail.console.MailClientConsole import MailClientConsole
from shared.store.ChatSessionStore import ChatSessionStore
from shared.store.DatabaseManager import DatabaseManager, utcnow
from shared.store.FallbackDataStore import FallbackDataStore
from shared.store.tables import email_processing, payment_schedules, platform_analytics, platform_employees, platform_employers


def with_database(helper_config, body):
    """Run ``body(database)`` against a fresh SQLite file database."""

    async def _run():
        database = DatabaseManager(helper_config=helper_config)
        await database.boot()
        await database.do_init_schema()
        try:
            return await body(database)
        finally:
            await database.close()

    return asyncio.run(_run())


##########################################
############## CHAT SESSIONS #############
##########################################


def test_session_lifecycle(helper_config):
    async def body(database):
        store = ChatSessionStore(helper_config=helper_config, database=database)
        session_id = await store.do_create_session("42")
        await store.do_add_message(session_id, "hi", sender="user")
        await store.do_add_message(session_id, "report", sender="assistant", message_type="payment_reminder")
        messages = await store.do_get_messages(session_id)
        last = await store.do_get_messages(session_id, limit=1)
        ended = await store.do_end_session(session_id)
        unknown = await store.do_end_session("admin_0_missing")
        session = await store.do_get_session(session_id)
        return session_id, messages, last, ended, unknown, session

    session_id, messages, last, ended, unknown, session = with_database(helper_config, body)
    assert session_id.startswith("admin_")
    assert [(m["sender"], m["type"]) for m in messages] == [("user", "text"), ("assistant", "payment_reminder")]
    assert [m["message"] for m in last] == ["report"]
    assert ended is True
    assert unknown is False
    assert session["ended_at"] is not None
    assert session["user_id"] == "42"


def test_context_merge_unions_lists(helper_config):
    async def body(database):
        store = ChatSessionStore(helper_config=helper_config, database=database)
        session_id = await store.do_create_session("42")
        await store.do_merge_context(session_id, {"topics_discussed": ["payroll"], "last_intent": "payroll"})
        return await store.do_merge_context(session_id, {"topics_discussed": ["payroll", "database"], "last_intent": "database"})

    assert with_database(helper_config, body) == {"topics_discussed": ["payroll", "database"], "last_intent": "database"}


def test_chat_service_persists_conversation(helper_config):
    class NoPayrollClient:
        def get_engine_name(self):
            return "fake"

        async def do_fetch_payroll(self, use_cache=True, params=None):
            return []

    async def body(database):
        store = ChatSessionStore(helper_config=helper_config, database=database)
        router = build_admin_router(helper_config, hr_client=NoPayrollClient(), mail_client=MailClientConsole(helper_config=helper_config))
        service = ChatSessionService(helper_config=helper_config, store=store, router=router)
        started = await service.do_start("7")
        response = await service.do_message(started["session_id"], "7", "payroll please")
        history = await service.do_history(started["session_id"])
        session = await store.do_get_session(started["session_id"])
        return started, response, history, session

    started, response, history, session = with_database(helper_config, body)
    assert started["message"] == WELCOME_MESSAGE
    assert response.type == "payment_reminder"
    assert [m["sender"] for m in history] == ["assistant", "user", "assistant"]
    assert history[-1]["type"] == "payment_reminder"
    assert session["context"] == {"topics_discussed": ["payroll"], "last_intent": "payroll"}


def test_message_for_unknown_session(helper_config):
    async def body(database):
        store = ChatSessionStore(helper_config=helper_config, database=database)
        router = build_admin_router(helper_config, hr_client=None, mail_client=MailClientConsole(helper_config=helper_config))
        service = ChatSessionService(helper_config=helper_config, store=store, router=router)
        await service.do_message("admin_0_missing", "7", "hello")

    with pytest.raises(SessionNotFoundError):
        with_database(helper_config, body)


##########################################
############## FALLBACK DATA #############
##########################################


def test_pending_payments_and_overview(helper_config):
    today = date(2024, 6, 1)

    async def body(database):
        async with database.get_session() as session:
            await session.execute(
                insert(payment_schedules),
                [
                    {"payment_period": "May", "employee_count": 3, "total_amount": 300, "currency": "RWF", "due_date": today - timedelta(days=2), "status": "pending"},
                    {"payment_period": "June", "employee_count": 4, "total_amount": 400, "currency": "RWF", "due_date": today + timedelta(days=5), "status": "pending"},
                    {"payment_period": "April", "employee_count": 5, "total_amount": 500, "currency": "RWF", "due_date": today - timedelta(days=30), "status": "paid"},
                ],
            )
        store = FallbackDataStore(helper_config=helper_config, database=database)
        return await store.do_fetch_pending_payments(), await store.do_fetch_payment_overview(today=today)

    pending, overview = with_database(helper_config, body)
    assert [p["payment_period"] for p in pending] == ["May", "June"]
    assert pending[1]["due_date"] == date(2024, 6, 6)
    assert overview == {"overdue_count": 1, "overdue_amount": 300.0, "upcoming_payments": 2}


def test_employee_overview(helper_config):
    async def body(database):
        async with database.get_session() as session:
            await session.execute(
                insert(platform_employees),
                [
                    {"full_name": "A", "location": "Kigali", "employment_status": "active"},
                    {"full_name": "B", "location": "Kigali", "employment_status": "inactive"},
                    {"full_name": "C", "location": "Huye", "employment_status": "active"},
                ],
            )
        return await FallbackDataStore(helper_config=helper_config, database=database).do_fetch_employee_overview()

    assert with_database(helper_config, body) == {"total_employees": 3, "active_employees": 2, "locations": 2}


def test_email_summary_and_analytics(helper_config):
    async def body(database):
        now = utcnow()
        async with database.get_session() as session:
            await session.execute(
                insert(email_processing),
                [
                    {"email_subject": "Job?", "sender_email": "a@x.rw", "email_category": "job_seeker", "priority": "high", "processing_status": "pending", "created_at": now},
                    {"email_subject": "Old", "sender_email": "b@x.rw", "email_category": "employer", "priority": "low", "processing_status": "pending", "created_at": now - timedelta(days=3)},
                ],
            )
            await session.execute(
                insert(platform_analytics),
                [
                    {"metric_name": "total_active_users", "metric_value": 120, "metric_type": "count", "category": "users", "period_type": "monthly", "period_value": "2024-05"},
                    {"metric_name": "successful_hires", "metric_value": 8, "metric_type": "count", "category": "hiring", "period_type": "monthly", "period_value": "2024-04"},
                ],
            )
        store = FallbackDataStore(helper_config=helper_config, database=database)
        return await store.do_fetch_email_summary(hours=24), await store.do_fetch_analytics(period_value="2024-05")

    emails, analytics = with_database(helper_config, body)
    assert [row["email_category"] for row in emails["summary"]] == ["job_seeker"]
    assert emails["priority_breakdown"] == {"high": 1, "low": 1}
    assert [row["email_subject"] for row in emails["pending_emails"]] == ["Job?"]
    assert [row["metric_name"] for row in analytics["metrics"]] == ["total_active_users"]
    assert [row["period_value"] for row in analytics["trends"]] == ["2024-05", "2024-04"]


def test_ending_a_session_keeps_a_summary(helper_config):
    class Summarizer:
        def __init__(self, fail=False):
            self.fail = fail
            self.seen = []

        async def do_summarize_conversation(self, history):
            self.seen.append(history)
            if self.fail:
                raise TimeoutError("llm down")
            return "Admin asked about payroll."

    async def body(database):
        store = ChatSessionStore(helper_config=helper_config, database=database)
        router = build_admin_router(helper_config, hr_client=None, mail_client=MailClientConsole(helper_config=helper_config))
        summarizer = Summarizer()
        service = ChatSessionService(helper_config=helper_config, store=store, router=router, summarizer=summarizer)

        quiet = (await service.do_start("7"))["session_id"]
        await service.do_end(quiet)

        talked = (await service.do_start("7"))["session_id"]
        await store.do_add_message(talked, "payroll please", sender="user")
        await service.do_end(talked)

        failing = ChatSessionService(helper_config=helper_config, store=store, router=router, summarizer=Summarizer(fail=True))
        broken = (await failing.do_start("7"))["session_id"]
        await store.do_add_message(broken, "hello", sender="user")
        ended = await failing.do_end(broken)

        return summarizer.seen, await store.do_get_session(quiet), await store.do_get_session(talked), await store.do_get_session(broken), ended

    seen, quiet, talked, broken, ended = with_database(helper_config, body)
    assert len(seen) == 1
    assert "summary" not in quiet["context"]
    assert talked["context"]["summary"] == "Admin asked about payroll."
    assert ended is True
    assert "summary" not in broken["context"]
    assert broken["ended_at"] is not None


def test_payment_reminders_include_processing_schedules(helper_config):
    today = date(2024, 6, 1)

    async def body(database):
        async with database.get_session() as session:
            await session.execute(
                insert(payment_schedules),
                [
                    {"payment_period": "May", "employee_count": 3, "total_amount": 300, "currency": "RWF", "due_date": today - timedelta(days=2), "status": "pending"},
                    {"payment_period": "June", "employee_count": 4, "total_amount": 400, "currency": "RWF", "due_date": today + timedelta(days=9), "status": "processing"},
                    {"payment_period": "April", "employee_count": 5, "total_amount": 500, "currency": "RWF", "due_date": today - timedelta(days=30), "status": "paid"},
                ],
            )
        return await FallbackDataStore(helper_config=helper_config, database=database).do_fetch_payment_reminders(today=today)

    reminders = with_database(helper_config, body)
    assert [(p["payment_period"], p["days_until_due"]) for p in reminders["upcoming_payments"]] == [("May", -2), ("June", 9)]
    assert reminders["overdue_summary"] == {"overdue_count": 1, "overdue_amount": 300.0}
    assert reminders["total_pending"] == 2


def test_local_dashboard_counts_open_tasks(helper_config):
    today = date(2024, 6, 1)

    async def body(database):
        async with database.get_session() as session:
            await session.execute(
                insert(payment_schedules),
                [{"payment_period": "June", "employee_count": 4, "total_amount": 400, "currency": "RWF", "due_date": today + timedelta(days=3), "status": "pending"}],
            )
            await session.execute(
                insert(platform_employers),
                [
                    {"company_name": "Acme", "verification_status": "verified", "job_postings_count": 4},
                    {"company_name": "Umuco", "verification_status": "pending", "job_postings_count": 1},
                ],
            )
            await session.execute(
                insert(email_processing),
                [
                    {"email_subject": "Urgent", "priority": "high", "processing_status": "pending", "created_at": utcnow()},
                    {"email_subject": "Done", "priority": "high", "processing_status": "processed", "created_at": utcnow()},
                ],
            )
        store = ChatSessionStore(helper_config=helper_config, database=database)
        await store.do_create_session("7")
        await store.do_create_session("8", bot_type="job_seeker")
        return await FallbackDataStore(helper_config=helper_config, database=database).do_fetch_local_dashboard(today=today)

    dashboard = with_database(helper_config, body)
    assert dashboard["overview"]["employers"] == {"total_employers": 2, "verified_employers": 1, "pending_verifications": 1, "total_job_postings": 5}
    assert dashboard["overview"]["employees"]["total_employees"] == 0
    assert dashboard["activity"] == {"admin_sessions_today": 1}
    assert dashboard["pending_tasks"] == {"upcoming_payments": 1, "pending_verifications": 1, "high_priority_emails": 1}
