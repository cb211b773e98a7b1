from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

NodeType = Literal["input", "output", "error", "skill", "auto"]
EdgeStyle = Literal["solid", "dashed"]


class NodeMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str
    command_index: int = Field(..., ge=0)
    exit_code: int | None = None
    duration_ms: float | None = None
    # Untruncated result text, only set when content was shortened for display
    full_output: str | None = None


class FlowNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: NodeType
    content: str
    timestamp: datetime
    title: str | None = None
    metadata: NodeMetadata


class FlowEdge(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    from_: str = Field(..., alias="from")
    to: str
    style: EdgeStyle
    error: bool = False


class GraphDelta(BaseModel):
    nodes: list[FlowNode]
    edges: list[FlowEdge]
    last_output_id: str


class FlowGraph(BaseModel):
    conversation_id: str
    created_at: datetime
    nodes: list[FlowNode]
    edges: list[FlowEdge]
