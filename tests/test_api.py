from contextlib import asynccontextmanager

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from conftest import make_jwt
from server.routers.AdminRouter import router as admin_router
from server.routers.ChatRouter import router as chat_router
from server.routers.HealthRouter import router as health_router
from services.admin_chat.ChatSessionService import WELCOME_MESSAGE, ChatSessionService
from services.admin_chat.DashboardService import DashboardService
from services.admin_chat.MessageRouter import build_admin_router
from shared.clients.hr.kozi.HRClientKozi import HRClientKozi
from shared.clients.mail.console.MailClientConsole import MailClientConsole
from shared.exceptions import TransientNetworkError
from shared.store.ChatSessionStore import ChatSessionStore
from shared.store.DatabaseManager import DatabaseManager
from shared.store.FallbackDataStore import FallbackDataStore

HEADERS = {"X-Api-Key": "test-key"}


def kozi_api(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/login":
        return httpx.Response(200, json={"token": make_jwt(4_000_000_000)})
    if path == "/health":
        return httpx.Response(200, json={"status": "ok"})
    if path == "/admin/select_jobseekers":
        return httpx.Response(200, json={"data": [{"id": 1, "first_name": "Aline", "status": "active", "profile_completion": 80}]})
    if path == "/admin/select_jobss":
        return httpx.Response(200, json=[{"id": 5, "title": "Housemaid"}])
    return httpx.Response(200, json={"data": []})


@pytest.fixture
def client(helper_config, logger):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = DatabaseManager(helper_config=helper_config)
        await database.boot()
        await database.do_init_schema()
        hr_client = HRClientKozi(helper_config=helper_config)
        hr_client.set_transport(httpx.MockTransport(kozi_api))
        await hr_client.boot()
        mail_client = MailClientConsole(helper_config=helper_config)
        fallback_store = FallbackDataStore(helper_config=helper_config, database=database)

        app.state.logging = logger
        app.state.helper_config = helper_config
        app.state.database = database
        app.state.hr_client = hr_client
        app.state.mail_client = mail_client
        app.state.fallback_store = fallback_store
        app.state.knowledge_loader = None
        app.state.retrieval = None
        app.state.dashboard_service = DashboardService(helper_config=helper_config, hr_client=hr_client)
        app.state.chat_service = ChatSessionService(
            helper_config=helper_config,
            store=ChatSessionStore(helper_config=helper_config, database=database),
            router=build_admin_router(helper_config, hr_client=hr_client, mail_client=mail_client, fallback_store=fallback_store),
        )
        yield
        await hr_client.close()
        await database.close()

    app = FastAPI(lifespan=lifespan)
    app.include_router(health_router)
    app.include_router(chat_router)
    app.include_router(admin_router)
    with TestClient(app) as test_client:
        yield test_client


def test_health_needs_no_key(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["hr_api"] is True
    assert body["database"] is True


@pytest.mark.parametrize("headers", [{}, {"X-Api-Key": "wrong"}])
def test_admin_routes_require_api_key(client, headers):
    assert client.post("/admin/chat/start", json={"user_id": "1"}, headers=headers).status_code == 401
    assert client.get("/admin/dashboard", headers=headers).status_code == 401


def test_chat_conversation(client):
    started = client.post("/admin/chat/start", json={"user_id": "1"}, headers=HEADERS).json()
    assert started["message"] == WELCOME_MESSAGE
    session_id = started["session_id"]

    reply = client.post(
        "/admin/chat/message",
        json={"session_id": session_id, "user_id": "1", "message": "Any salary due?"},
        headers=HEADERS,
    )
    assert reply.status_code == 200
    assert reply.json()["type"] == "payment_reminder"

    history = client.get(f"/admin/chat/history/{session_id}", headers=HEADERS).json()
    assert [m["sender"] for m in history["messages"]] == ["assistant", "user", "assistant"]
    assert history["messages"][1]["message"] == "Any salary due?"

    ended = client.post("/admin/chat/end", json={"session_id": session_id}, headers=HEADERS)
    assert ended.json() == {"session_id": session_id, "status": "ended"}


def test_message_to_unknown_session(client):
    response = client.post(
        "/admin/chat/message",
        json={"session_id": "admin_0_missing", "user_id": "1", "message": "hello"},
        headers=HEADERS,
    )
    assert response.status_code == 404
    assert client.post("/admin/chat/end", json={"session_id": "admin_0_missing"}, headers=HEADERS).status_code == 404


def test_empty_message_is_rejected(client):
    response = client.post("/admin/chat/message", json={"session_id": "s", "user_id": "1", "message": ""}, headers=HEADERS)
    assert response.status_code == 422


def test_dashboard_and_cache(client):
    dashboard = client.get("/admin/dashboard", headers=HEADERS).json()
    assert dashboard["summary"] == {"job_seekers_count": 1, "jobs_count": 1, "incomplete_profiles_count": 0, "payroll_count": 0}
    assert dashboard["errors"] == {}

    cleared = client.post("/admin/cache/clear", json={"endpoint": "/admin/select_jobss"}, headers=HEADERS).json()
    assert cleared == {"cleared": 1, "endpoint": "/admin/select_jobss"}
    assert client.post("/admin/cache/clear", headers=HEADERS).json()["cleared"] == 3


def test_api_status(client):
    body = client.get("/admin/api-status", headers=HEADERS).json()
    assert body["healthy"] is True
    assert body["status"]["engine"] == "kozi"
    assert "password" not in body["status"]
    assert [t["ok"] for t in body["response_times"]] == [True, True]


def test_reporting_routes_on_empty_database(client):
    emails = client.get("/admin/emails/summary", params={"hours": 48}, headers=HEADERS).json()
    assert emails == {"summary": [], "priority_breakdown": {}, "pending_emails": []}
    analytics = client.get("/admin/analytics", params={"period_value": "2024-05"}, headers=HEADERS).json()
    assert analytics["period_value"] == "2024-05"
    assert analytics["metrics"] == []


def test_knowledge_reload_without_embeddings(client):
    assert client.post("/admin/knowledge/reload", headers=HEADERS).status_code == 503


def test_local_dashboard_and_payment_reminders(client):
    client.post("/admin/chat/start", json={"user_id": "1"}, headers=HEADERS)

    dashboard = client.get("/admin/dashboard/local", headers=HEADERS)
    assert dashboard.status_code == 200
    body = dashboard.json()
    assert body["activity"] == {"admin_sessions_today": 1}
    assert body["pending_tasks"] == {"upcoming_payments": 0, "pending_verifications": 0, "high_priority_emails": 0}

    reminders = client.get("/admin/payment-reminders", headers=HEADERS).json()
    assert reminders == {"upcoming_payments": [], "overdue_summary": {"overdue_count": 0, "overdue_amount": 0.0}, "total_pending": 0}
    assert client.get("/admin/payment-reminders").status_code == 401


def test_assistant_answers_with_requested_persona(client):
    asked = []

    class Retrieval:
        async def do_generate_contextual_response(self, message, history=None, user_context=None, persona="admin"):
            asked.append((message, persona, user_context))
            if message == "fail":
                raise TransientNetworkError("llm timeout")
            return "Upload your CV from the dashboard."

    body = {"message": "How do I finish my profile?", "user_context": {"profile_completion": 40}}
    assert client.post("/admin/assistant/ask", json=body, headers=HEADERS).status_code == 503

    client.app.state.retrieval = Retrieval()
    reply = client.post("/admin/assistant/ask", json=body, headers=HEADERS)
    assert reply.json() == {"persona": "job_seeker", "reply": "Upload your CV from the dashboard."}
    assert asked == [("How do I finish my profile?", "job_seeker", {"profile_completion": 40})]

    assert client.post("/admin/assistant/ask", json={"message": "hi", "persona": "pirate"}, headers=HEADERS).status_code == 400
    assert client.post("/admin/assistant/ask", json={"message": "fail"}, headers=HEADERS).status_code == 502
