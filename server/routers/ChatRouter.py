from fastapi import APIRouter, Depends, HTTPException, Request

from server.dependencies.auth import verify_api_key
from server.models.requests import ChatMessageRequest, EndSessionRequest, StartSessionRequest
from server.models.responses import EndSessionResponse, HistoryResponse, StartSessionResponse
from services.admin_chat.ChatSessionService import SessionNotFoundError
from shared.models.chat import ChatResponse

router = APIRouter(prefix="/admin/chat", tags=["chat"])


@router.post("/start")
async def start_session(
    request: Request,
    body: StartSessionRequest,
    _: None = Depends(verify_api_key),
) -> StartSessionResponse:
    """Open a chat session and return the welcome message."""
    chat_service = request.app.state.chat_service
    return StartSessionResponse(**await chat_service.do_start(user_id=body.user_id, bot_type=body.bot_type))


@router.post("/message")
async def send_message(
    request: Request,
    body: ChatMessageRequest,
    _: None = Depends(verify_api_key),
) -> ChatResponse:
    """Route an admin message and return the reply.

    Args:
        request (Request): FastAPI request (provides app.state.chat_service).
        body (ChatMessageRequest): Session, user and message text.
        _ (None): Auth dependency result (unused).

    Returns:
        ChatResponse: The rendered reply and its type.

    Raises:
        HTTPException: 404 if the session does not exist.
    """
    chat_service = request.app.state.chat_service
    try:
        return await chat_service.do_message(session_id=body.session_id, user_id=body.user_id, message=body.message)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Unknown chat session '{body.session_id}'")


@router.get("/history/{session_id}")
async def get_history(
    request: Request,
    session_id: str,
    _: None = Depends(verify_api_key),
) -> HistoryResponse:
    chat_service = request.app.state.chat_service
    return HistoryResponse(session_id=session_id, messages=await chat_service.do_history(session_id))


@router.post("/end")
async def end_session(
    request: Request,
    body: EndSessionRequest,
    _: None = Depends(verify_api_key),
) -> EndSessionResponse:
    chat_service = request.app.state.chat_service
    if not await chat_service.do_end(body.session_id):
        raise HTTPException(status_code=404, detail=f"Unknown chat session '{body.session_id}'")
    return EndSessionResponse(session_id=body.session_id, status="ended")
