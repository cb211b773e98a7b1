from fastapi import APIRouter

from backend.models.request import SearchRequest
from backend.models.response import SearchResult
from backend.services.graph_store import get_store
from backend.services.search import evaluate_search

router = APIRouter(prefix="/api", tags=["search"])


@router.post("/search", response_model=SearchResult)
async def search_nodes(request: SearchRequest) -> SearchResult:
    return evaluate_search(list(get_store().nodes), request.query, request.type_filter)
