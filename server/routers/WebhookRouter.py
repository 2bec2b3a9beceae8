from fastapi import APIRouter, Depends, Request

from server.dependencies.auth import verify_api_key
from server.models.requests import DocumentFeedRequest
from server.models.responses import FeedResponse

router = APIRouter(prefix="/webhook", tags=["webhook"])


@router.post("/documents")
async def webhook_documents(
    request: Request,
    body: DocumentFeedRequest,
    _: None = Depends(verify_api_key),
) -> FeedResponse:
    """Accept the full current document collection of an owner.

    The snapshot replaces the previous one; every open session of that owner
    picks up the new collection and rebuilds its filter vocabularies.

    Args:
        request (Request): FastAPI request (provides app.state.session_service).
        body (DocumentFeedRequest): JSON body with owner_id and the documents.
        _ (None): Auth dependency result (unused).

    Returns:
        FeedResponse: Acknowledgement with the number of refreshed sessions.
    """
    session_service = request.app.state.session_service
    refreshed = session_service.do_update_documents(body.owner_id, body.documents)
    return FeedResponse(
        status="accepted",
        owner_id=body.owner_id,
        documents=len(body.documents),
        sessions_refreshed=refreshed,
    )
