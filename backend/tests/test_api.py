import pytest
from fastapi.testclient import TestClient

from backend.main import app
from backend.services import graph_store, terminal_parser


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(graph_store, "_store", graph_store.GraphStore())
    monkeypatch.setattr(terminal_parser, "_parser", terminal_parser.TerminalParser())
    return TestClient(app)


def _execute(client: TestClient, command: str, index: int, exit_code: int = 0, session_id: str = "s1"):
    return client.post(
        "/api/execute",
        json={
            "command": command,
            "result": {"success": exit_code == 0, "output": f"{command} out", "exit_code": exit_code},
            "session_id": session_id,
            "command_index": index,
        },
    )


def test_execute_returns_delta_and_updates_state(client):
    first = _execute(client, "pwd", 0)
    second = _execute(client, "ls", 1)

    assert first.status_code == 200
    body = second.json()
    assert len(body["nodes"]) == 2
    dashed = [e for e in body["edges"] if e["style"] == "dashed"]
    assert dashed[0]["from"] == first.json()["last_output_id"]
    assert dashed[0]["to"] == body["nodes"][0]["id"]

    state = client.get("/api/state").json()
    assert len(state["nodes"]) == 4
    assert len(state["edges"]) == 3

    health = client.get("/health").json()
    assert health == {"status": "ok", "nodes": 4, "edges": 3}


def test_execute_error_mapping(client):
    empty = _execute(client, "", 0)
    assert empty.status_code == 400

    _execute(client, "pwd", 0)
    skipped = _execute(client, "ls", 2)
    assert skipped.status_code == 409
    assert "expected command index 1" in skipped.json()["detail"]

    assert len(client.get("/api/state").json()["nodes"]) == 2


def test_search_over_store(client):
    _execute(client, "pwd", 0)
    _execute(client, "invalid-xyz-command", 1, exit_code=127)

    result = client.post("/api/search", json={"query": "INVALID", "type_filter": "all"}).json()
    assert result["count"] == 2
    assert result["label"] == "2 results"
    assert result["focus_id"] == result["matches"][0]["id"]

    errors = client.post("/api/search", json={"query": "", "type_filter": "error"}).json()
    assert [m["type"] for m in errors["matches"]] == ["error"]

    idle = client.post("/api/search", json={}).json()
    assert idle["active"] is False
    assert idle["matches"] == []


def test_clear_session_restarts_chaining_but_keeps_numbering(client):
    _execute(client, "pwd", 0)
    _execute(client, "ls", 1)
    assert client.post("/api/clear", json={"session_id": "s1"}).json()["session_id"] == "s1"

    assert _execute(client, "whoami", 0).status_code == 409
    restarted = _execute(client, "whoami", 2)
    assert restarted.status_code == 200
    assert len(restarted.json()["edges"]) == 1

    state = client.get("/api/state").json()
    indices = [n["metadata"]["command_index"] for n in state["nodes"] if n["type"] == "input"]
    assert indices == [0, 1, 2]


def test_clear_all_empties_graph_and_sessions(client):
    _execute(client, "pwd", 0)
    assert client.post("/api/clear").json() == {"success": True, "session_id": None}

    assert client.get("/api/state").json()["nodes"] == []
    assert _execute(client, "pwd", 0).status_code == 200


def test_external_nodes_are_stored_and_searchable(client):
    executed = _execute(client, "pwd", 0).json()
    skill = {
        "id": "skill-1",
        "type": "skill",
        "title": "Thought",
        "content": "Check the working directory first",
        "timestamp": "2024-05-01T12:00:00Z",
        "metadata": {"session_id": "s1", "command_index": 0},
    }
    edge = {"id": "e-skill", "from": executed["last_output_id"], "to": "skill-1", "style": "solid"}

    added = client.post("/api/nodes", json={"nodes": [skill], "edges": [edge]})
    assert added.json() == {"success": True, "nodes_added": 1, "edges_added": 1}

    result = client.post("/api/search", json={"query": "thought", "type_filter": "skill"}).json()
    assert [m["id"] for m in result["matches"]] == ["skill-1"]
    assert client.get("/health").json()["edges"] == 2


def test_external_nodes_rejected_without_partial_append(client):
    node = {
        "id": "auto-1",
        "type": "auto",
        "content": "Summary section",
        "timestamp": "2024-05-01T12:00:00Z",
        "metadata": {"session_id": "s1", "command_index": 0},
    }
    dangling = {"id": "e-x", "from": "ghost", "to": "auto-1", "style": "dashed"}

    response = client.post("/api/nodes", json={"nodes": [node], "edges": [dangling]})

    assert response.status_code == 400
    assert client.get("/api/state").json()["nodes"] == []
