"""FastAPI application entry point for the HR admin bridge."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from server.routers.AdminRouter import router as admin_router
from server.routers.ChatRouter import router as chat_router
from server.routers.HealthRouter import router as health_router
from services.admin_chat.ChatSessionService import ChatSessionService
from services.admin_chat.DashboardService import DashboardService
from services.admin_chat.MessageRouter import build_admin_router
from services.knowledge.KnowledgeLoader import KnowledgeLoader
from services.knowledge.RetrievalService import RetrievalService
from services.knowledge.VectorStore import VectorStore
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.hr.HRClientInterface import HRClientInterface
from shared.clients.hr.HRClientManager import HRClientManager
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.clients.mail.MailClientManager import MailClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging
from shared.store.ChatSessionStore import ChatSessionStore
from shared.store.DatabaseManager import DatabaseManager
from shared.store.FallbackDataStore import FallbackDataStore

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


async def boot_optional_ai_clients(helper_config: HelperConfig) -> tuple[LLMClientInterface | None, EmbedClientInterface | None]:
    """Boot the LLM and embedding clients.

    Both are optional: without them the keyword handlers keep working and open
    questions are answered with the admin greeting.
    """
    clients = []
    for manager_class in (LLMClientManager, EmbedClientManager):
        try:
            client = manager_class(helper_config=helper_config).get_client()
            await client.boot()
            clients.append(client)
        except Exception as e:
            logging.warning("%s unavailable, continuing without it: %s", manager_class.__name__, e)
            clients.append(None)
    return clients[0], clients[1]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    app.state.logging = logging
    app.state.helper_config = helper_config = HelperConfig(logger=logging)
    # fail fast, every admin route needs it
    helper_config.get_string_val("APP_API_KEY")

    database = DatabaseManager(helper_config=helper_config)
    await database.boot()
    await database.do_init_schema()

    hr_client = HRClientManager(helper_config=helper_config).get_client()
    await hr_client.boot()
    mail_client = MailClientManager(helper_config=helper_config).get_client()
    llm_client, embed_client = await boot_optional_ai_clients(helper_config)

    retrieval, knowledge_loader = None, None
    if embed_client is not None:
        vector_store = VectorStore(helper_config=helper_config, embed_client=embed_client)
        await vector_store.do_initialize()
        knowledge_loader = KnowledgeLoader(helper_config=helper_config, vector_store=vector_store)
        if llm_client is not None:
            retrieval = RetrievalService(helper_config=helper_config, vector_store=vector_store, llm_client=llm_client)
        if helper_config.get_bool_val("KNOWLEDGE_LOAD_ON_START", default=False):
            await knowledge_loader.do_load()

    fallback_store = FallbackDataStore(helper_config=helper_config, database=database)
    message_router = build_admin_router(
        helper_config,
        hr_client=hr_client,
        mail_client=mail_client,
        retrieval=retrieval,
        fallback_store=fallback_store,
    )

    app.state.database = database
    app.state.hr_client = hr_client
    app.state.mail_client = mail_client
    app.state.fallback_store = fallback_store
    app.state.knowledge_loader = knowledge_loader
    app.state.retrieval = retrieval
    app.state.dashboard_service = DashboardService(helper_config=helper_config, hr_client=hr_client)
    app.state.chat_service = ChatSessionService(
        helper_config=helper_config,
        store=ChatSessionStore(helper_config=helper_config, database=database),
        router=message_router,
        summarizer=llm_client,
    )

    await check_connections(hr_client, mail_client)
    logging.info("HR admin bridge ready.", color="green")

    # while the app is running...
    yield

    # when the app shuts down, close all client connections
    logging.info("Shutting down, closing all clients...")
    for client in [hr_client, llm_client, embed_client]:
        if client is not None:
            await client.close()
    await database.close()
    logging.info("All clients closed.")


async def check_connections(hr_client: HRClientInterface, mail_client) -> None:
    """Check the HR platform and the mail transport on startup.

    Both are non-fatal: the chat falls back to local data and mail results
    report their own failures.
    """
    if not await hr_client.do_health_check():
        logging.warning("HR API '%s' health check failed, will use fallback data.", hr_client.get_engine_name())
    if not await mail_client.verify_connection():
        logging.warning("Mail transport '%s' is not reachable. Reminder campaigns will fail.", mail_client.get_engine_name())


app = FastAPI(
    title="hr_admin_bridge",
    description=(
        "Admin chatbot backend for an HR platform: keyword routed reports on payroll, "
        "job seekers and incomplete profiles, reminder mail campaigns and knowledge grounded answers."
    ),
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(chat_router)
app.include_router(admin_router)


if __name__ == "__main__":
    import uvicorn

    logging.info(
        "Starting hr_admin_bridge API Server v%s from root dir: %s on port 8000...",
        app_version,
        os.environ.get("ROOT_DIR", "unknown"),
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
