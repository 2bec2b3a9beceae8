from fastapi import APIRouter, Depends, Request, Response

from server.dependencies.auth import verify_api_key
from server.models.requests import CreateSessionRequest
from server.models.responses import DisplayResponse, SessionResponse
from services.discovery.insights import CollectionInsights

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", status_code=201)
async def create_session(
    request: Request,
    body: CreateSessionRequest,
    _: None = Depends(verify_api_key),
) -> SessionResponse:
    """Open a discovery session on the owner's current collection.

    Args:
        request (Request): FastAPI request (provides app.state.session_service).
        body (CreateSessionRequest): JSON body with the owner_id.
        _ (None): Auth dependency result (unused).

    Returns:
        SessionResponse: The new session id and the size of its collection.
    """
    session_service = request.app.state.session_service
    session_id = session_service.create_session(body.owner_id)
    return SessionResponse(
        session_id=session_id,
        owner_id=body.owner_id,
        documents=len(session_service.get_engine(session_id).get_documents()),
    )


@router.delete("/{session_id}", status_code=204)
async def delete_session(request: Request, session_id: str, _: None = Depends(verify_api_key)) -> Response:
    request.app.state.session_service.delete_session(session_id)
    return Response(status_code=204)


@router.get("/{session_id}/documents")
async def get_documents(request: Request, session_id: str, _: None = Depends(verify_api_key)) -> DisplayResponse:
    """Return the documents displayed for the session's current mode."""
    state = request.app.state.session_service.get_display_state(session_id)
    return DisplayResponse.from_state(state)


@router.delete("/{session_id}/notice")
async def dismiss_notice(request: Request, session_id: str, _: None = Depends(verify_api_key)) -> DisplayResponse:
    state = request.app.state.session_service.dismiss_notice(session_id)
    return DisplayResponse.from_state(state)


@router.get("/{session_id}/insights")
async def get_insights(request: Request, session_id: str, _: None = Depends(verify_api_key)) -> CollectionInsights:
    """Type breakdown and soon expiring documents of the session's collection."""
    return request.app.state.session_service.get_insights(session_id)
