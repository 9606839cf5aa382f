from datetime import datetime, timezone

from fastapi import APIRouter, Request
from sqlalchemy import text

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict:
    """Liveness of the bridge and reachability of the HR API and the local database. No auth."""
    hr_client = request.app.state.hr_client
    database = request.app.state.database

    database_ok = True
    try:
        async with database.get_session() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        request.app.state.logging.warning("Database health check failed: %s", e)
        database_ok = False

    return {
        "status": "ok" if database_ok else "degraded",
        "hr_api": await hr_client.do_health_check(),
        "database": database_ok,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
