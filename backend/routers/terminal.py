import logging

from fastapi import APIRouter, HTTPException

from backend.models.execution import ExecutionContext
from backend.models.graph import FlowGraph, GraphDelta
from backend.models.request import ClearRequest, ExecuteRequest, NodesRequest
from backend.models.response import ClearResponse, NodesResponse
from backend.services.graph_store import get_store
from backend.services.terminal_parser import InvalidCommand, OutOfOrderIndex, get_parser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["terminal"])


@router.post("/execute", response_model=GraphDelta)
async def execute_command(request: ExecuteRequest) -> GraphDelta:
    context = ExecutionContext(session_id=request.session_id, command_index=request.command_index)
    try:
        # Store first; the session only advances once the delta is in the graph
        delta = get_parser().parse_execution(
            request.command, request.result, context, sink=get_store().append
        )
    except InvalidCommand as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except OutOfOrderIndex as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    logger.info(
        "Session %s command %d -> %s (%d edges)",
        request.session_id,
        request.command_index,
        delta.last_output_id,
        len(delta.edges),
    )
    return delta


@router.post("/nodes", response_model=NodesResponse)
async def add_nodes(request: NodesRequest) -> NodesResponse:
    """Append nodes produced outside the terminal parser, e.g. skill or auto nodes."""
    try:
        get_store().extend(request.nodes, request.edges)
    except ValueError as e:
        logger.warning("Rejected external nodes: %s", e)
        raise HTTPException(status_code=400, detail=str(e)) from e

    return NodesResponse(
        success=True,
        nodes_added=len(request.nodes),
        edges_added=len(request.edges),
    )


@router.get("/state", response_model=FlowGraph)
async def get_state() -> FlowGraph:
    return get_store().snapshot()


@router.post("/clear", response_model=ClearResponse)
async def clear_flow(request: ClearRequest | None = None) -> ClearResponse:
    session_id = request.session_id if request else None
    if session_id:
        # Next command starts a new chain; its index still follows the last one
        get_parser().restart_chaining(session_id)
        return ClearResponse(success=True, session_id=session_id)

    get_store().clear()
    get_parser().reset()
    return ClearResponse(success=True)
