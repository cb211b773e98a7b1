from pydantic import BaseModel, Field

from backend.models.graph import FlowNode


class SearchResult(BaseModel):
    matches: list[FlowNode] = Field(default_factory=list)
    count: int = 0
    active: bool = False
    label: str = ""
    focus_id: str | None = None


class ClearResponse(BaseModel):
    success: bool
    session_id: str | None = None


class HealthResponse(BaseModel):
    status: str
    nodes: int
    edges: int


class NodesResponse(BaseModel):
    success: bool
    nodes_added: int
    edges_added: int
