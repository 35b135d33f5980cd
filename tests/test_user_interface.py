from __future__ import annotations

from collections.abc import Callable
from typing import Any

from fastapi.testclient import TestClient


def _send(client: TestClient, headers: dict[str, str], what: str, data: Any = None) -> dict[str, Any]:
    response = client.post("/user", json={"what": what, "data": data}, headers=headers)
    assert response.status_code == 200
    return response.json()


def _create_project(client: TestClient, headers: dict[str, str], name: str, **fields: Any) -> int:
    reply = _send(client, headers, "SaveProjectEdit", {"project": {"name": name, **fields}, "members": []})
    assert reply["what"] == "savedprojectedit"
    return reply["content"]["project"]["id"]


def test_admin_invites_member_who_clocks_time(
    client: TestClient,
    make_user: Callable[..., int],
    login_headers: Callable[..., dict[str, str]],
) -> None:
    alice = make_user("alice")
    bob = make_user("bob")
    as_alice = login_headers("alice")
    as_bob = login_headers("bob")

    project_id = _create_project(client, as_alice, "Acme")

    reply = _send(client, as_alice, "GetProjectList")
    assert reply == {"what": "projectlist", "content": [{"id": project_id, "name": "Acme", "role": "Admin"}]}

    reply = _send(
        client,
        as_alice,
        "SaveProjectEdit",
        {"project": {"id": project_id, "name": "Acme"}, "members": [{"id": bob, "role": "Member", "delete": False}]},
    )
    assert reply["what"] == "savedprojectedit"
    assert reply["content"]["members"] == [
        {"id": alice, "name": "alice", "role": "Admin"},
        {"id": bob, "name": "bob", "role": "Member"},
    ]

    reply = _send(
        client,
        as_bob,
        "SaveProjectEdit",
        {"project": {"id": project_id, "name": "Bob's Acme"}, "members": []},
    )
    assert reply == {"what": "saveprojectedit_denied", "content": None}

    reply = _send(
        client,
        as_bob,
        "SaveProjectTime",
        {
            "project": project_id,
            "savetimeentries": [{"project": project_id, "user": bob, "startdate": 1000, "enddate": 2000}],
        },
    )
    assert reply["what"] == "projecttime"
    assert reply["content"]["project"]["name"] == "Acme"
    assert [(entry["user"], entry["startdate"]) for entry in reply["content"]["timeentries"]] == [(bob, 1000)]

    reply = _send(client, as_bob, "GetUserTime")
    assert reply["what"] == "usertime"
    assert [entry["project"] for entry in reply["content"]] == [project_id]


def test_project_edit_read_requires_membership(
    client: TestClient,
    make_user: Callable[..., int],
    login_headers: Callable[..., dict[str, str]],
) -> None:
    make_user("alice")
    make_user("mallory")
    project_id = _create_project(client, login_headers("alice"), "Acme", description="secret")

    reply = _send(client, login_headers("alice"), "GetProjectEdit", project_id)
    assert reply["what"] == "projectedit"
    assert reply["content"]["project"]["description"] == "secret"

    assert _send(client, login_headers("mallory"), "GetProjectEdit", project_id) == {
        "what": "projectedit_denied",
        "content": None,
    }
    assert _send(client, login_headers("mallory"), "GetProjectTime", project_id) == {
        "what": "projecttime_denied",
        "content": None,
    }


def test_missing_project_reads_like_a_private_one(
    client: TestClient,
    make_user: Callable[..., int],
    login_headers: Callable[..., dict[str, str]],
) -> None:
    make_user("alice")
    make_user("mallory")
    private_id = _create_project(client, login_headers("alice"), "Acme")
    as_mallory = login_headers("mallory")

    for project_id in (private_id, 999):
        assert _send(client, as_mallory, "GetProjectTime", project_id) == {
            "what": "projecttime_denied",
            "content": None,
        }
        response = client.post("/public", json={"what": "GetProjectTime", "data": project_id})
        assert response.json() == {"what": "projecttime_denied", "content": None}


def test_unknown_what_code(
    client: TestClient,
    make_user: Callable[..., int],
    login_headers: Callable[..., dict[str, str]],
) -> None:
    make_user("alice")

    reply = _send(client, login_headers("alice"), "DropAllTables")

    assert reply == {"what": "server error", "content": "invalid 'what' code:'DropAllTables'"}


def test_malformed_data_is_a_server_error(
    client: TestClient,
    make_user: Callable[..., int],
    login_headers: Callable[..., dict[str, str]],
) -> None:
    make_user("alice")
    headers = login_headers("alice")

    assert _send(client, headers, "GetProjectEdit", "not-a-number")["what"] == "server error"
    assert _send(client, headers, "SaveProjectTime", {"savetimeentries": "nope"})["what"] == "server error"
    assert _send(client, headers, "GetProjectEdit", 404)["what"] == "projectedit_denied"


def test_requests_without_login_are_refused(client: TestClient) -> None:
    response = client.post("/user", json={"what": "GetProjectList", "data": None})
    assert response.status_code == 200
    assert response.json() == {"what": "not logged in", "content": None}

    response = client.post(
        "/user",
        json={"what": "GetProjectList", "data": None},
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.json() == {"what": "not logged in", "content": None}


def test_public_project_time(
    client: TestClient,
    make_user: Callable[..., int],
    login_headers: Callable[..., dict[str, str]],
) -> None:
    make_user("alice")
    headers = login_headers("alice")
    project_id = _create_project(client, headers, "Acme")

    response = client.post("/public", json={"what": "GetProjectTime", "data": project_id})
    assert response.json() == {"what": "projecttime_denied", "content": None}

    _send(client, headers, "SaveProjectEdit", {"project": {"id": project_id, "name": "Acme", "public": True}})

    response = client.post("/public", json={"what": "GetProjectTime", "data": project_id})
    body = response.json()
    assert body["what"] == "projecttime"
    assert body["content"]["project"]["public"] is True

    response = client.post("/public", json={"what": "GetProjectList", "data": None})
    assert response.json()["what"] == "server error"


def test_all_members_lists_every_user(
    client: TestClient,
    make_user: Callable[..., int],
    login_headers: Callable[..., dict[str, str]],
) -> None:
    alice = make_user("alice")
    bob = make_user("bob")

    reply = _send(client, login_headers("bob"), "GetAllMembers")

    assert reply == {"what": "allmembers", "content": [{"id": alice, "name": "alice"}, {"id": bob, "name": "bob"}]}


def test_invoice_state_needs_member_role(
    client: TestClient,
    make_user: Callable[..., int],
    login_headers: Callable[..., dict[str, str]],
) -> None:
    make_user("alice")
    bob = make_user("bob")
    carol = make_user("carol")
    as_alice = login_headers("alice")
    project_id = _create_project(client, as_alice, "Acme")
    _send(
        client,
        as_alice,
        "SaveProjectEdit",
        {
            "project": {"id": project_id, "name": "Acme"},
            "members": [{"id": bob, "role": "Member"}, {"id": carol, "role": "Observer"}],
        },
    )

    reply = _send(
        client,
        login_headers("bob"),
        "SaveProjectInvoice",
        {"id": project_id, "invoice_seq": 1, "extra_fields": [{"n": "PO", "v": "42"}]},
    )
    assert reply["what"] == "savedprojectinvoice"
    assert reply["content"]["invoice_seq"] == 1
    assert reply["content"]["extra_fields"] == [{"n": "PO", "v": "42"}]

    reply = _send(client, login_headers("carol"), "SaveProjectInvoice", {"id": project_id, "invoice_seq": 2})
    assert reply == {"what": "saveprojectinvoice_denied", "content": None}


def test_register_login_logout(client: TestClient) -> None:
    response = client.post("/auth/register", json={"uid": "dana", "pwd": "pw", "email": "dana@test.local"})
    body = response.json()
    assert body["what"] == "registered"
    assert body["content"]["name"] == "dana"

    response = client.post("/auth/register", json={"uid": "dana", "pwd": "pw"})
    assert response.json()["what"] == "server error"

    response = client.post("/auth/login", json={"uid": "dana", "pwd": "wrong"})
    assert response.json() == {"what": "invalid user or pwd", "content": None}

    response = client.post("/auth/login", json={"uid": "dana", "pwd": "pw"})
    body = response.json()
    assert body["what"] == "logged in"
    assert body["content"]["name"] == "dana"
    assert client.cookies.get("token") == body["content"]["token"]

    # The cookie alone authenticates.
    response = client.post("/user", json={"what": "GetProjectList", "data": None})
    assert response.json() == {"what": "projectlist", "content": []}

    response = client.post("/auth/logout")
    assert response.json() == {"what": "logged out", "content": None}

    client.cookies.clear()
    response = client.post(
        "/user",
        json={"what": "GetProjectList", "data": None},
        headers={"Authorization": f"Bearer {body['content']['token']}"},
    )
    assert response.json() == {"what": "not logged in", "content": None}


def test_register_with_invite_from_admin(
    client: TestClient,
    make_user: Callable[..., int],
    login_headers: Callable[..., dict[str, str]],
) -> None:
    make_user("alice")
    as_alice = login_headers("alice")
    project_id = _create_project(client, as_alice, "Acme")

    response = client.post(
        "/auth/register",
        json={"uid": "erin", "pwd": "pw", "invite": {"projects": [{"id": project_id, "role": "Observer"}]}},
        headers=as_alice,
    )
    erin = response.json()["content"]["id"]

    reply = _send(client, as_alice, "GetProjectEdit", project_id)
    assert {"id": erin, "name": "erin", "role": "Observer"} in reply["content"]["members"]
