import logging
import uuid
from datetime import datetime, timezone

from backend.models.graph import FlowEdge, FlowGraph, FlowNode, GraphDelta

logger = logging.getLogger(__name__)


class GraphStore:
    """Append-only node/edge collection the parser's deltas are merged into."""

    def __init__(self):
        self._nodes: list[FlowNode] = []
        self._edges: list[FlowEdge] = []
        self._index: dict[str, FlowNode] = {}
        self._reset_identity()

    def _reset_identity(self) -> None:
        self.conversation_id = uuid.uuid4().hex[:10]
        self.created_at = datetime.now(timezone.utc)

    @property
    def nodes(self) -> tuple[FlowNode, ...]:
        return tuple(self._nodes)

    @property
    def edges(self) -> tuple[FlowEdge, ...]:
        return tuple(self._edges)

    def get_node(self, node_id: str) -> FlowNode | None:
        return self._index.get(node_id)

    def append(self, delta: GraphDelta) -> None:
        self.extend(delta.nodes, delta.edges)

    def extend(self, nodes: list[FlowNode], edges: list[FlowEdge]) -> None:
        """Append nodes then edges, or nothing if any of them would be invalid."""
        incoming = {n.id for n in nodes}
        duplicates = incoming & self._index.keys()
        if duplicates or len(incoming) != len(nodes):
            raise ValueError(f"Duplicate node ids: {sorted(duplicates) or 'repeated within request'}")

        known = self._index.keys() | incoming
        for edge in edges:
            if edge.from_ not in known or edge.to not in known:
                raise ValueError(f"Edge {edge.id} references a node that does not exist")

        self._nodes.extend(nodes)
        self._edges.extend(edges)
        self._index.update((n.id, n) for n in nodes)

    def snapshot(self) -> FlowGraph:
        return FlowGraph(
            conversation_id=self.conversation_id,
            created_at=self.created_at,
            nodes=list(self._nodes),
            edges=list(self._edges),
        )

    def clear(self) -> None:
        logger.info(
            "Clearing flow %s (%d nodes, %d edges)",
            self.conversation_id,
            len(self._nodes),
            len(self._edges),
        )
        self._nodes.clear()
        self._edges.clear()
        self._index.clear()
        self._reset_identity()


_store: GraphStore | None = None


def get_store() -> GraphStore:
    global _store
    if _store is None:
        _store = GraphStore()
    return _store
