from fastapi import APIRouter, Depends, Request

from server.dependencies.auth import verify_api_key
from server.models.requests import AiSearchRequest, SearchRequest
from server.models.responses import DisplayResponse

router = APIRouter(prefix="/sessions/{session_id}/search", tags=["search"])


@router.post("")
async def manual_search(
    request: Request,
    session_id: str,
    body: SearchRequest,
    _: None = Depends(verify_api_key),
) -> DisplayResponse:
    """Fuzzy search over the filtered collection. An empty query resets to unfiltered.

    Args:
        request (Request): FastAPI request (provides app.state.session_service).
        session_id (str): The discovery session.
        body (SearchRequest): JSON body with the query string.
        _ (None): Auth dependency result (unused).

    Returns:
        DisplayResponse: The ranked documents.
    """
    state = request.app.state.session_service.submit_search(session_id, body.query)
    return DisplayResponse.from_state(state)


@router.post("/ai")
async def ai_search(
    request: Request,
    session_id: str,
    body: AiSearchRequest,
    _: None = Depends(verify_api_key),
) -> DisplayResponse:
    """Natural-language search through the configured intelligent search strategy.

    Clears all filters and the manual query. If the language model fails the
    response is an empty ai_search result carrying a notice.

    Args:
        request (Request): FastAPI request (provides app.state.session_service).
        session_id (str): The discovery session.
        body (AiSearchRequest): JSON body with the non-empty query.
        _ (None): Auth dependency result (unused).

    Returns:
        DisplayResponse: The documents in the order returned by the strategy.
    """
    state = await request.app.state.session_service.do_ai_search(session_id, body.query)
    return DisplayResponse.from_state(state)
