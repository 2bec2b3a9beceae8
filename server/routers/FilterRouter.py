from fastapi import APIRouter, Depends, Request

from server.dependencies.auth import verify_api_key
from server.models.requests import FilterToggleRequest
from server.models.responses import CategoryOptionsResponse, DisplayResponse, FilterOptionsResponse
from shared.models.document import FilterCategory

router = APIRouter(prefix="/sessions/{session_id}/filters", tags=["filters"])


@router.get("")
async def get_filter_options(request: Request, session_id: str, _: None = Depends(verify_api_key)) -> FilterOptionsResponse:
    """List the canonical options of every category and the current selection.

    Args:
        request (Request): FastAPI request (provides app.state.session_service).
        session_id (str): The discovery session.
        _ (None): Auth dependency result (unused).

    Returns:
        FilterOptionsResponse: Sorted options and active values per category.
    """
    engine = request.app.state.session_service.get_engine(session_id)
    return FilterOptionsResponse(options=engine.get_filter_options(), active=engine.get_active_filters())


@router.get("/{category}")
async def get_category_options(
    request: Request,
    session_id: str,
    category: FilterCategory,
    search: str | None = None,
    _: None = Depends(verify_api_key),
) -> CategoryOptionsResponse:
    """Options of a single category, narrowed by ``search`` when given."""
    engine = request.app.state.session_service.get_engine(session_id)
    return CategoryOptionsResponse(
        category=category,
        search=search,
        options=engine.get_category_options(category, search=search),
    )


@router.post("/toggle")
async def toggle_filter(
    request: Request,
    session_id: str,
    body: FilterToggleRequest,
    _: None = Depends(verify_api_key),
) -> DisplayResponse:
    """Select or deselect a filter value. Leaves an active AI search."""
    state = request.app.state.session_service.toggle_filter(session_id, body.category, body.value)
    return DisplayResponse.from_state(state)


@router.post("/clear")
async def clear_filters(request: Request, session_id: str, _: None = Depends(verify_api_key)) -> DisplayResponse:
    state = request.app.state.session_service.clear_filters(session_id)
    return DisplayResponse.from_state(state)
