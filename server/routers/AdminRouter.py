from fastapi import APIRouter, Depends, HTTPException, Request

from server.dependencies.auth import verify_api_key
from server.models.requests import AssistantRequest, CacheClearRequest, KnowledgeReloadRequest
from server.models.responses import ApiStatusResponse, AssistantResponse, CacheClearResponse, KnowledgeReloadResponse
from services.knowledge.personas import PERSONAS
from shared.exceptions import APIStatusError, TransientNetworkError

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/dashboard")
async def get_dashboard(
    request: Request,
    _: None = Depends(verify_api_key),
) -> dict:
    """Job seekers, jobs, incomplete profiles and payroll in one call; failed resources come back empty."""
    return await request.app.state.dashboard_service.do_collect()


@router.get("/dashboard/local")
async def get_local_dashboard(
    request: Request,
    _: None = Depends(verify_api_key),
) -> dict:
    """Overview and open tasks from the local admin database, available while the HR API is down."""
    return await request.app.state.fallback_store.do_fetch_local_dashboard()


@router.get("/payment-reminders")
async def get_payment_reminders(
    request: Request,
    _: None = Depends(verify_api_key),
) -> dict:
    return await request.app.state.fallback_store.do_fetch_payment_reminders()


@router.get("/api-status")
async def get_api_status(
    request: Request,
    _: None = Depends(verify_api_key),
) -> ApiStatusResponse:
    """Health, token state and response times of the HR platform API.

    Args:
        request (Request): FastAPI request (provides app.state.hr_client).
        _ (None): Auth dependency result (unused).

    Returns:
        ApiStatusResponse: Health flag, client status and per endpoint timings.
    """
    hr_client = request.app.state.hr_client
    healthy = await hr_client.do_health_check()
    timings = await hr_client.do_measure_response_times()
    return ApiStatusResponse(healthy=healthy, status=hr_client.get_status(), response_times=timings)


@router.post("/cache/clear")
async def clear_cache(
    request: Request,
    body: CacheClearRequest | None = None,
    _: None = Depends(verify_api_key),
) -> CacheClearResponse:
    endpoint = body.endpoint if body else None
    cleared = request.app.state.hr_client.clear_cache(endpoint)
    return CacheClearResponse(cleared=cleared, endpoint=endpoint)


@router.get("/emails/summary")
async def get_email_summary(
    request: Request,
    hours: int = 24,
    _: None = Depends(verify_api_key),
) -> dict:
    return await request.app.state.fallback_store.do_fetch_email_summary(hours=hours)


@router.get("/analytics")
async def get_analytics(
    request: Request,
    period: str = "monthly",
    period_value: str | None = None,
    _: None = Depends(verify_api_key),
) -> dict:
    return await request.app.state.fallback_store.do_fetch_analytics(period_type=period, period_value=period_value)


@router.post("/knowledge/reload")
async def reload_knowledge(
    request: Request,
    body: KnowledgeReloadRequest | None = None,
    _: None = Depends(verify_api_key),
) -> KnowledgeReloadResponse:
    """Re-embed the seed facts and the documents folder.

    Raises:
        HTTPException: 503 if no embedding backend is configured.
    """
    knowledge_loader = request.app.state.knowledge_loader
    if knowledge_loader is None:
        raise HTTPException(status_code=503, detail="Knowledge base unavailable: no embedding backend configured.")
    return KnowledgeReloadResponse(**await knowledge_loader.do_load(rebuild=body.rebuild if body else False))


@router.post("/assistant/ask")
async def ask_assistant(
    request: Request,
    body: AssistantRequest,
    _: None = Depends(verify_api_key),
) -> AssistantResponse:
    """Answer one question with a knowledge grounded persona, e.g. to preview the job seeker assistant.

    Raises:
        HTTPException: 400 for an unknown persona, 503 without an LLM or embedding backend,
            502 if the LLM call fails.
    """
    retrieval = request.app.state.retrieval
    if retrieval is None:
        raise HTTPException(status_code=503, detail="Assistant unavailable: no LLM or embedding backend configured.")
    if body.persona not in PERSONAS:
        raise HTTPException(status_code=400, detail=f"Unknown persona '{body.persona}'")
    try:
        reply = await retrieval.do_generate_contextual_response(
            body.message, history=body.history, user_context=body.user_context, persona=body.persona
        )
    except (TransientNetworkError, APIStatusError) as e:
        request.app.state.logging.error("Assistant request failed: %s", e)
        raise HTTPException(status_code=502, detail="The language model backend did not answer.")
    return AssistantResponse(persona=body.persona, reply=reply)
