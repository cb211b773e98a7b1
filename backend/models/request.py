from pydantic import BaseModel, Field

from backend.models.execution import ExecutionResult
from backend.models.graph import FlowEdge, FlowNode


class ExecuteRequest(BaseModel):
    command: str = Field(..., max_length=4000)
    result: ExecutionResult
    session_id: str = Field(..., min_length=1, max_length=200)
    command_index: int


class SearchRequest(BaseModel):
    query: str = Field(default="", max_length=500)
    type_filter: str = "all"


class ClearRequest(BaseModel):
    session_id: str | None = None


class NodesRequest(BaseModel):
    nodes: list[FlowNode] = Field(..., min_length=1)
    edges: list[FlowEdge] = Field(default_factory=list)
