"""HTTP contract of the fluency, certificate and account endpoints."""
import pytest

from services.kv_store import history_prefix, user_key

pytestmark = pytest.mark.anyio

ADMIN = {"Authorization": "Bearer admin-token"}
STUDENT = {"Authorization": "Bearer student-token"}


@pytest.fixture
async def accounts(identity, put_profile):
    identity.add("admin-token", "admin", role="teacher", name="Docent")
    identity.add("student-token", "lotte", role="student", name="Lotte")
    await put_profile("admin", role="teacher", name="Docent", fluencyLevel="A1")
    await put_profile("lotte", role="student", name="Lotte", fluencyLevel="A1")


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.parametrize(
    "method, path",
    [
        ("GET", "/fluency/lotte"),
        ("PATCH", "/fluency/lotte"),
        ("GET", "/fluency/history/lotte"),
        ("GET", "/certificates/lotte"),
        ("GET", "/certificates/lotte/some-id"),
        ("GET", "/profile"),
        ("GET", "/users"),
        ("POST", "/migrate-fluency-levels"),
    ],
)
async def test_bearer_token_required(client, accounts, method, path):
    response = await client.request(method, path, json={"level": "A2"})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}

    response = await client.request(method, path, json={"level": "A2"}, headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


async def test_get_fluency_level(client, accounts, put_profile):
    await put_profile("legacy", role="student")

    response = await client.get("/fluency/lotte", headers=STUDENT)
    assert response.status_code == 200
    body = response.json()
    assert body["userId"] == "lotte"
    assert body["fluencyLevel"] == "A1"
    assert body["metadata"] == {
        "code": "A1",
        "name": "Beginner",
        "description": "Can understand and use familiar everyday expressions",
        "color": "#10b981",
        "icon": "\U0001F331",
    }

    legacy = (await client.get("/fluency/legacy", headers=STUDENT)).json()
    assert legacy["fluencyLevel"] == "A1"
    assert legacy["fluencyLevelUpdatedAt"] is None

    missing = await client.get("/fluency/ghost", headers=STUDENT)
    assert missing.status_code == 404
    assert missing.json() == {"error": "User not found"}


async def test_upgrade_returns_certificate(client, accounts):
    response = await client.patch("/fluency/lotte", json={"level": "A2"}, headers=ADMIN)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["userId"] == "lotte"
    assert body["previousLevel"] == "A1"
    assert body["newLevel"] == "A2"
    assert body["fluencyLevelUpdatedBy"] == "admin"
    assert body["fluencyLevelUpdatedAt"].startswith("2025-03-01T09:00:00")
    assert body["metadata"]["code"] == "A2"
    certificate = body["certificate"]
    assert certificate["certificateNumber"] == "DLA-2025-A2-000001"
    assert certificate["userId"] == "lotte"
    assert certificate["userName"] == "Lotte"
    assert certificate["issuedBy"] == "admin"


async def test_downgrade_has_no_certificate(client, accounts, put_profile):
    await put_profile("pieter", role="student", fluencyLevel="B2")
    response = await client.patch("/fluency/pieter", json={"level": "B1"}, headers=ADMIN)
    assert response.status_code == 200
    assert response.json()["certificate"] is None


async def test_new_level_alias_is_accepted(client, accounts):
    response = await client.patch("/fluency/lotte", json={"newLevel": "A2"}, headers=ADMIN)
    assert response.status_code == 200
    assert response.json()["newLevel"] == "A2"


async def test_patch_errors(client, accounts, read_key):
    before = await read_key(user_key("lotte"))

    forbidden = await client.patch("/fluency/lotte", json={"level": "A2"}, headers=STUDENT)
    assert forbidden.status_code == 403
    assert forbidden.json() == {"error": "Admin access required"}

    missing = await client.patch("/fluency/ghost", json={"level": "A2"}, headers=ADMIN)
    assert missing.status_code == 404

    for bad in ("a1", "B3", "", "D1", 3):
        invalid = await client.patch("/fluency/lotte", json={"level": bad}, headers=ADMIN)
        assert invalid.status_code == 400
        assert invalid.json() == {"error": "Invalid fluency level"}

    no_level = await client.patch("/fluency/lotte", json={}, headers=ADMIN)
    assert no_level.json() == {"error": "Invalid fluency level"}

    jump = await client.patch("/fluency/lotte", json={"level": "B2"}, headers=ADMIN)
    assert jump.status_code == 400
    assert jump.json() == {"error": "Invalid level transition. Can only move one level at a time"}

    same = await client.patch("/fluency/lotte", json={"level": "A1"}, headers=ADMIN)
    assert same.status_code == 400

    assert await read_key(user_key("lotte")) == before


async def test_malformed_body(client, accounts):
    response = await client.patch(
        "/fluency/lotte",
        content=b"not json",
        headers={**ADMIN, "Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert "error" in response.json()


async def test_history_endpoint(client, accounts, put_profile):
    await client.patch("/fluency/lotte", json={"level": "A2"}, headers=ADMIN)
    await client.patch("/fluency/lotte", json={"level": "B1"}, headers=ADMIN)

    response = await client.get("/fluency/history/lotte", headers=STUDENT)
    assert response.status_code == 200
    history = response.json()
    assert isinstance(history, list)
    assert [(e["previousLevel"], e["newLevel"]) for e in history] == [("A2", "B1"), ("A1", "A2")]
    assert history[0]["changedByName"] == "Docent"

    await put_profile("quiet", role="student", fluencyLevel="A1")
    empty = await client.get("/fluency/history/quiet", headers=STUDENT)
    assert empty.status_code == 200
    assert empty.json() == []

    missing = await client.get("/fluency/history/ghost", headers=STUDENT)
    assert missing.status_code == 404


async def test_certificate_endpoints(client, accounts, put_profile):
    await put_profile("bram", role="student", fluencyLevel="A1")
    first = (await client.patch("/fluency/lotte", json={"level": "A2"}, headers=ADMIN)).json()["certificate"]
    second = (await client.patch("/fluency/lotte", json={"level": "B1"}, headers=ADMIN)).json()["certificate"]
    other = (await client.patch("/fluency/bram", json={"level": "A2"}, headers=ADMIN)).json()["certificate"]
    assert other["certificateNumber"] == "DLA-2025-A2-000002"

    listed = await client.get("/certificates/lotte", headers=STUDENT)
    assert listed.status_code == 200
    assert [c["id"] for c in listed.json()] == [first["id"], second["id"]]

    one = await client.get(f"/certificates/lotte/{first['id']}", headers=STUDENT)
    assert one.status_code == 200
    assert one.json() == first

    cross_user = await client.get(f"/certificates/lotte/{other['id']}", headers=STUDENT)
    assert cross_user.status_code == 404
    assert cross_user.json() == {"error": "Certificate not found"}

    unknown_user = await client.get("/certificates/ghost", headers=STUDENT)
    assert unknown_user.status_code == 404


async def test_signup_assigns_initial_level(client, identity, read_prefix):
    response = await client.post(
        "/signup",
        json={"email": "sanne@example.com", "password": "geheim123", "name": "Sanne", "role": "student"},
    )
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["id"] == "user-1"
    assert user["fluencyLevel"] == "A1"
    assert user["fluencyLevelUpdatedBy"] == "system"

    [entry] = await read_prefix(history_prefix("user-1"))
    assert entry["previousLevel"] is None
    assert entry["changedBy"] == "system"


async def test_signup_rejects_unknown_role(client):
    response = await client.post(
        "/signup",
        json={"email": "x@example.com", "password": "geheim123", "name": "X", "role": "admin"},
    )
    assert response.status_code == 400


async def test_profile_migrates_legacy_record(client, identity, put_profile, read_key):
    identity.add("legacy-token", "legacy", role="student")
    await put_profile("legacy", role="student", name="Oud")

    response = await client.get("/profile", headers={"Authorization": "Bearer legacy-token"})
    assert response.status_code == 200
    profile = response.json()["profile"]
    assert profile["fluencyLevel"] == "A1"
    assert profile["name"] == "Oud"
    assert (await read_key(user_key("legacy")))["fluencyLevel"] == "A1"


async def test_users_list_is_admin_only(client, accounts):
    assert (await client.get("/users", headers=STUDENT)).status_code == 403

    response = await client.get("/users", headers=ADMIN)
    assert response.status_code == 200
    ids = {u["id"] for u in response.json()["users"]}
    assert ids == {"admin", "lotte"}


async def test_migrate_endpoint(client, accounts, put_profile):
    await put_profile("legacy", role="student")
    assert (await client.post("/migrate-fluency-levels", headers=STUDENT)).status_code == 403

    response = await client.post("/migrate-fluency-levels", headers=ADMIN)
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "migratedCount": 1,
        "skippedCount": 2,
        "message": "Migrated 1 users, skipped 2 users with existing fluency levels",
    }


async def test_unexpected_errors_surface_as_500(client, identity):
    async def broken(token):
        raise RuntimeError("identity provider offline")

    identity.resolve_token = broken
    response = await client.get("/fluency/lotte", headers=STUDENT)
    assert response.status_code == 500
    assert response.json() == {"error": "identity provider offline"}


async def test_corrupt_stored_level_is_a_server_error(client, accounts, put_profile):
    await put_profile("broken", role="student", fluencyLevel="b1")
    response = await client.get("/fluency/broken", headers=STUDENT)
    assert response.status_code == 500
    assert response.json() == {"error": "Stored fluency level for user broken is invalid"}


async def test_production_hides_unexpected_error_details(client, identity, monkeypatch):
    from config import settings

    async def broken(token):
        raise RuntimeError("connection string with secrets")

    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    identity.resolve_token = broken
    response = await client.get("/fluency/lotte", headers=STUDENT)
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
