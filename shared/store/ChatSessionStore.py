import secrets
import time

from sqlalchemy import insert, select, update

from shared.helper.HelperConfig import HelperConfig
from shared.store.DatabaseManager import DatabaseManager, utcnow
from shared.store.tables import chat_messages, chat_sessions


class ChatSessionStore:
    """Persistence for chat sessions and their ordered message log."""

    def __init__(self, helper_config: HelperConfig, database: DatabaseManager):
        self.logging = helper_config.get_logger()
        self._db = database

    @staticmethod
    def new_session_id(bot_type: str = "admin") -> str:
        return f"{bot_type}_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}"

    async def do_create_session(self, user_id: str, bot_type: str = "admin") -> str:
        session_id = self.new_session_id(bot_type)
        async with self._db.get_session() as session:
            await session.execute(
                insert(chat_sessions).values(
                    session_id=session_id,
                    user_id=str(user_id),
                    bot_type=bot_type,
                    context={},
                    created_at=utcnow(),
                )
            )
        self.logging.info("Chat session %s started for user %s.", session_id, user_id)
        return session_id

    async def do_get_session(self, session_id: str) -> dict | None:
        async with self._db.get_session() as session:
            result = await session.execute(select(chat_sessions).where(chat_sessions.c.session_id == session_id))
            row = result.mappings().first()
        return dict(row) if row else None

    async def do_add_message(self, session_id: str, message: str, sender: str, message_type: str = "text") -> None:
        async with self._db.get_session() as session:
            await session.execute(
                insert(chat_messages).values(
                    session_id=session_id,
                    message=message,
                    sender=sender,
                    message_type=message_type or "text",
                    created_at=utcnow(),
                )
            )

    async def do_get_messages(self, session_id: str, limit: int | None = None) -> list[dict]:
        """Messages in insertion order.

        Args:
            session_id (str): The session.
            limit (int | None): Keep only the most recent ``limit`` messages.

        Returns:
            list[dict]: [{"message", "sender", "type", "timestamp"}, ...]
        """
        stmt = (
            select(chat_messages.c.message, chat_messages.c.sender, chat_messages.c.message_type, chat_messages.c.created_at)
            .where(chat_messages.c.session_id == session_id)
            .order_by(chat_messages.c.id.asc())
        )
        async with self._db.get_session() as session:
            rows = (await session.execute(stmt)).all()
        messages = [
            {"message": row.message, "sender": row.sender, "type": row.message_type or "text", "timestamp": row.created_at}
            for row in rows
        ]
        return messages[-limit:] if limit else messages

    async def do_merge_context(self, session_id: str, updates: dict) -> dict:
        """Shallow-merge ``updates`` into the session context; list values are unioned in order.

        Returns:
            dict: The merged context ({} if the session does not exist).
        """
        async with self._db.get_session() as session:
            result = await session.execute(select(chat_sessions.c.context).where(chat_sessions.c.session_id == session_id))
            row = result.first()
            if row is None:
                self.logging.warning("Cannot merge context: unknown chat session %s.", session_id)
                return {}
            context = dict(row.context or {})
            for key, value in updates.items():
                if isinstance(value, list) and isinstance(context.get(key), list):
                    context[key] = context[key] + [v for v in value if v not in context[key]]
                else:
                    context[key] = value
            await session.execute(update(chat_sessions).where(chat_sessions.c.session_id == session_id).values(context=context))
        return context

    async def do_end_session(self, session_id: str) -> bool:
        async with self._db.get_session() as session:
            result = await session.execute(
                update(chat_sessions).where(chat_sessions.c.session_id == session_id).values(ended_at=utcnow())
            )
        ended = result.rowcount > 0
        if ended:
            self.logging.info("Chat session %s ended.", session_id)
        return ended
