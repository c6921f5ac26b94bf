"""
Tests de la API HTTP con TestClient.

Los tokens se firman con una clave cualquiera: sin JWT_SECRET la API solo
lee el `sub` sin verificar la firma.
"""

import uuid

import jwt
import pytest
from fastapi.testclient import TestClient

from api.main import app
from process_diagram_core.db.database import get_db_session
from process_diagram_core.db.helpers import create_user

CONTENT = {
    "nodes": [
        {"id": "s", "type": "start", "position": {"x": 0, "y": 0}, "data": {"name": "Inicio"}},
        {"id": "t", "type": "task", "position": {"x": 200, "y": 0}, "data": {"name": "Revisar"}},
        {"id": "e", "type": "end", "position": {"x": 400, "y": 0}, "data": {"name": "Fin"}},
    ],
    "edges": [
        {"id": "e1", "source": "s", "target": "t", "type": "sequence"},
        {"id": "e2", "source": "t", "target": "e", "type": "sequence"},
    ],
    "viewport": {"x": 0, "y": 0, "zoom": 1},
}


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def users():
    """Crea owner, editor, viewer, commenter, stranger y admin; devuelve sus headers."""
    headers = {}
    ids = {}
    with get_db_session() as session:
        for label in ("owner", "editor", "viewer", "commenter", "stranger", "admin"):
            user = create_user(
                session,
                email=f"{label}-{uuid.uuid4().hex[:8]}@example.com",
                name=label.title(),
                role="admin" if label == "admin" else "user",
            )
            ids[label] = user.id
            token = jwt.encode({"sub": user.id}, "clave-de-tests", algorithm="HS256")
            headers[label] = {"Authorization": f"Bearer {token}"}
    return {"headers": headers, "ids": ids}


@pytest.fixture
def process_id(client, users):
    h = users["headers"]
    response = client.post(
        "/api/v1/processes",
        json={"title": "Compras", "description": "Aprobación", "content": CONTENT},
        headers=h["owner"],
    )
    assert response.status_code == 200
    pid = response.json()["id"]
    for role in ("editor", "viewer", "commenter"):
        r = client.post(
            f"/api/v1/processes/{pid}/collaborators",
            json={"userId": users["ids"][role], "role": role},
            headers=h["owner"],
        )
        assert r.status_code == 200, r.text
    return pid


def test_missing_token_is_401(client):
    assert client.get("/api/v1/processes").status_code == 401


def test_get_process_returns_content_and_access_role(client, users, process_id):
    response = client.get(f"/api/v1/processes/{process_id}", headers=users["headers"]["owner"])

    assert response.status_code == 200
    data = response.json()
    assert data["accessRole"] == "owner"
    assert data["currentVersion"] == 1
    assert [n["id"] for n in data["nodes"]] == ["s", "t", "e"]
    assert data["viewCount"] == 0


def test_view_count_increments_for_non_owner(client, users, process_id):
    client.get(f"/api/v1/processes/{process_id}", headers=users["headers"]["viewer"])
    data = client.get(f"/api/v1/processes/{process_id}", headers=users["headers"]["viewer"]).json()

    assert data["accessRole"] == "viewer"
    assert data["viewCount"] == 2


def test_stranger_cannot_view_private_process(client, users, process_id):
    response = client.get(f"/api/v1/processes/{process_id}", headers=users["headers"]["stranger"])
    assert response.status_code == 403


def test_public_published_process_is_visible_to_anyone(client, users, process_id):
    client.put(
        f"/api/v1/processes/{process_id}",
        json={"status": "published", "visibility": "public"},
        headers=users["headers"]["owner"],
    )

    response = client.get(f"/api/v1/processes/{process_id}", headers=users["headers"]["stranger"])

    assert response.status_code == 200
    assert response.json()["accessRole"] is None


def test_viewer_update_is_denied(client, users, process_id):
    response = client.put(
        f"/api/v1/processes/{process_id}",
        json={"content": CONTENT},
        headers=users["headers"]["viewer"],
    )
    assert response.status_code == 403


@pytest.mark.parametrize("role", ["owner", "editor"])
def test_owner_and_editor_can_update(client, users, process_id, role):
    content = dict(CONTENT, nodes=CONTENT["nodes"][:1], edges=[])

    response = client.put(
        f"/api/v1/processes/{process_id}",
        json={"content": content, "createVersion": True, "versionComment": f"por {role}"},
        headers=users["headers"][role],
    )

    assert response.status_code == 200
    assert response.json() == {"success": True}
    data = client.get(f"/api/v1/processes/{process_id}", headers=users["headers"]["owner"]).json()
    assert [n["id"] for n in data["nodes"]] == ["s"]
    assert data["currentVersion"] == 2


def test_update_accepts_invalid_graph_but_not_dangling_edges(client, users, process_id):
    h = users["headers"]["editor"]
    only_task = {"nodes": [CONTENT["nodes"][1]], "edges": []}
    assert client.put(f"/api/v1/processes/{process_id}", json={"content": only_task}, headers=h).status_code == 200

    dangling = {"nodes": [CONTENT["nodes"][1]], "edges": [{"id": "x", "source": "t", "target": "ghost"}]}
    response = client.put(f"/api/v1/processes/{process_id}", json={"content": dangling}, headers=h)
    assert response.status_code == 422


def test_invalid_status_is_400(client, users, process_id):
    response = client.put(
        f"/api/v1/processes/{process_id}",
        json={"status": "borrado"},
        headers=users["headers"]["owner"],
    )
    assert response.status_code == 400


def test_versions_list_and_restore(client, users, process_id):
    h = users["headers"]
    client.put(
        f"/api/v1/processes/{process_id}",
        json={"content": {"nodes": [], "edges": []}, "createVersion": True},
        headers=h["editor"],
    )
    versions = client.get(f"/api/v1/processes/{process_id}/versions", headers=h["viewer"]).json()
    assert [v["versionNumber"] for v in versions] == [2, 1]
    v1_id = versions[1]["id"]

    assert client.post(f"/api/v1/versions/{v1_id}/restore", headers=h["viewer"]).status_code == 403
    restored = client.post(f"/api/v1/versions/{v1_id}/restore", headers=h["editor"])

    assert restored.status_code == 200
    assert restored.json()["versionNumber"] == 3
    assert restored.json()["comment"] == "Restored from version 1"
    v3 = client.get(f"/api/v1/processes/{process_id}/versions/3", headers=h["viewer"]).json()
    v1 = client.get(f"/api/v1/versions/{v1_id}", headers=h["viewer"]).json()
    assert v3["nodes"] == v1["nodes"]
    assert v3["edges"] == v1["edges"]


def test_compare_versions(client, users, process_id):
    h = users["headers"]
    client.put(
        f"/api/v1/processes/{process_id}",
        json={"content": {"nodes": CONTENT["nodes"][:2], "edges": CONTENT["edges"][:1]}, "createVersion": True},
        headers=h["owner"],
    )
    versions = client.get(f"/api/v1/processes/{process_id}/versions", headers=h["owner"]).json()

    response = client.get(
        "/api/v1/versions/compare",
        params={"left": versions[1]["id"], "right": versions[0]["id"]},
        headers=h["owner"],
    )

    assert response.status_code == 200
    diff = response.json()
    assert diff["removedNodes"] == ["e"]
    assert diff["removedEdges"] == ["e2"]
    assert diff["addedNodes"] == []


def test_comment_permissions_and_resolve(client, users, process_id):
    h = users["headers"]
    url = f"/api/v1/processes/{process_id}/comments"

    assert client.post(url, json={"content": "Hola"}, headers=h["viewer"]).status_code == 403

    created = client.post(url, json={"content": "¿Quién aprueba?", "nodeId": "t"}, headers=h["commenter"])
    assert created.status_code == 200
    comment_id = created.json()["id"]

    resolved = client.post(f"/api/v1/comments/{comment_id}/resolve", headers=h["editor"])
    assert resolved.json()["resolved"] is True

    listed = client.get(url, params={"node_id": "t"}, headers=h["viewer"]).json()
    assert [c["id"] for c in listed] == [comment_id]


def test_collaborator_management(client, users, process_id):
    h = users["headers"]
    ids = users["ids"]
    url = f"/api/v1/processes/{process_id}/collaborators"

    # Solo el owner gestiona colaboradores
    denied = client.post(url, json={"userId": ids["stranger"], "role": "viewer"}, headers=h["editor"])
    assert denied.status_code == 403
    assert client.post(url, json={"userId": ids["owner"], "role": "owner"}, headers=h["owner"]).status_code == 400

    updated = client.put(f"{url}/{ids['viewer']}", json={"role": "commenter"}, headers=h["owner"])
    assert updated.json()["role"] == "commenter"

    # Cada colaborador puede quitarse a sí mismo, pero no a otros
    assert client.delete(f"{url}/{ids['editor']}", headers=h["viewer"]).status_code == 403
    assert client.delete(f"{url}/{ids['viewer']}", headers=h["viewer"]).status_code == 200

    roles = {c["userId"]: c["role"] for c in client.get(url, headers=h["owner"]).json()}
    assert ids["viewer"] not in roles
    assert roles[ids["editor"]] == "editor"


def test_soft_delete_unarchive_and_hard_delete(client, users, process_id):
    h = users["headers"]
    url = f"/api/v1/processes/{process_id}"

    assert client.delete(url, headers=h["editor"]).status_code == 403
    assert client.delete(url, headers=h["owner"]).status_code == 200
    archived = client.get(url, headers=h["owner"]).json()
    assert archived["status"] == "archived"
    assert archived["deletedAt"] is not None

    client.post(f"{url}/unarchive", headers=h["owner"])
    assert client.get(url, headers=h["owner"]).json()["status"] == "draft"

    assert client.delete(url, params={"hard": True}, headers=h["admin"]).status_code == 200
    assert client.get(url, headers=h["owner"]).status_code == 404


def test_duplicate_belongs_to_caller(client, users, process_id):
    h = users["headers"]
    response = client.post(f"/api/v1/processes/{process_id}/duplicate", headers=h["viewer"])

    assert response.status_code == 200
    copy = client.get(f"/api/v1/processes/{response.json()['id']}", headers=h["viewer"]).json()
    assert copy["title"] == "Compras (Copy)"
    assert copy["accessRole"] == "owner"
    assert copy["currentVersion"] == 1


def test_validate_endpoint(client, users):
    response = client.post(
        "/api/v1/processes/validate",
        json={"nodes": [{"id": "n1", "type": "task", "data": {"name": ""}}], "edges": []},
        headers=users["headers"]["stranger"],
    )

    assert response.status_code == 200
    report = response.json()
    assert report["isValid"] is False
    assert [e["code"] for e in report["errors"]] == ["MISSING_START", "MISSING_END", "MISSING_NAME"]
    assert report["warnings"][0]["nodeId"] == "n1"


@pytest.mark.parametrize(
    "node",
    [
        {"id": "n1", "type": "task", "position": [1, 2], "data": {"name": "A"}},
        {"id": "n1", "type": "task", "data": {"name": "A", "conditions": 5}},
        {"id": "n1", "type": "task", "data": {"name": 7}},
    ],
)
def test_validate_malformed_node_is_400(client, users, node):
    response = client.post(
        "/api/v1/processes/validate",
        json={"nodes": [node], "edges": []},
        headers=users["headers"]["owner"],
    )
    assert response.status_code == 400


@pytest.mark.parametrize(
    "data, position",
    [
        ({"name": 7}, {"x": 0, "y": 0}),
        ({"name": "Revisar"}, "x"),
    ],
)
def test_update_with_malformed_node_is_400_and_keeps_content(client, users, process_id, data, position):
    h = users["headers"]["owner"]
    bad = {"nodes": [{"id": "t", "type": "task", "position": position, "data": data}], "edges": []}

    response = client.put(f"/api/v1/processes/{process_id}", json={"content": bad}, headers=h)

    assert response.status_code == 400
    stored = client.get(f"/api/v1/processes/{process_id}", headers=h).json()
    assert [n["data"]["name"] for n in stored["nodes"]] == ["Inicio", "Revisar", "Fin"]


def test_export_then_import(client, users, process_id):
    h = users["headers"]
    exported = client.get(f"/api/v1/processes/{process_id}/export", headers=h["viewer"])
    assert exported.status_code == 200
    assert exported.headers["content-type"].startswith("application/json")

    imported = client.post("/api/v1/processes/import", json=exported.json(), headers=h["stranger"])

    assert imported.status_code == 200
    data = client.get(f"/api/v1/processes/{imported.json()['id']}", headers=h["stranger"]).json()
    assert data["title"] == "Compras"
    assert data["nodes"] == exported.json()["nodes"]
    assert data["edges"] == exported.json()["edges"]


def test_import_without_edges_is_400(client, users):
    response = client.post(
        "/api/v1/processes/import",
        json={"title": "Roto", "nodes": []},
        headers=users["headers"]["owner"],
    )
    assert response.status_code == 400


def test_unknown_process_is_404(client, users):
    response = client.get("/api/v1/processes/no-existe", headers=users["headers"]["owner"])
    assert response.status_code == 404


def test_block_catalog(client):
    categories = client.get("/api/v1/blocks").json()

    assert sum(len(c["blocks"]) for c in categories) == 25
    start = client.get("/api/v1/blocks/start").json()
    assert start["hasInputHandle"] is False
    assert client.get("/api/v1/blocks/teleport").status_code == 404
