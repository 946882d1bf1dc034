import pytest


pytestmark = pytest.mark.asyncio


async def _login_headers(client, email: str, password: str):
    resp = await client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": password},
    )
    assert resp.status_code == 200
    token = resp.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


async def test_admin_user_management_flow(client, create_admin):
    admin, admin_password = await create_admin()
    admin_headers = await _login_headers(client, admin.email, admin_password)

    # Create a normal user via public endpoint
    user_payload = {
        "firstName": "Member",
        "lastName": "One",
        "email": "member1@acme.io",
        "password": "Member#123",
        "confirmPassword": "Member#123",
        "country": "CA",
        "roles": ["Professional"],
    }
    register_resp = await client.post("/api/v1/auth/register", json=user_payload)
    assert register_resp.status_code == 201
    user_id = register_resp.json()["data"]["id"]

    list_resp = await client.get("/api/v1/admin/users", headers=admin_headers)
    assert list_resp.status_code == 200
    emails = [item["email"] for item in list_resp.json()["data"]]
    assert emails == [admin.email, "member1@acme.io"]

    by_country = await client.get("/api/v1/admin/users", headers=admin_headers, params={"country": "ca"})
    assert [item["id"] for item in by_country.json()["data"]] == [user_id]

    detail_resp = await client.get(f"/api/v1/admin/users/{user_id}", headers=admin_headers)
    assert detail_resp.status_code == 200
    assert detail_resp.json()["data"]["roles"] == ["Professional"]

    missing_resp = await client.get("/api/v1/admin/users/999", headers=admin_headers)
    assert missing_resp.status_code == 404
    assert missing_resp.json()["message"] == "User not found with ID: 999"

    delete_resp = await client.delete(f"/api/v1/admin/users/{user_id}", headers=admin_headers)
    assert delete_resp.status_code == 200
    assert delete_resp.json()["success"] is True

    after_delete = await client.get(f"/api/v1/admin/users/{user_id}", headers=admin_headers)
    assert after_delete.status_code == 404

    # The deleted user can no longer log in
    login_again = await client.post(
        "/api/v1/auth/login", json={"email": "member1@acme.io", "password": "Member#123"}
    )
    assert login_again.status_code == 401


async def test_admin_role_management_flow(client, create_admin, create_user):
    admin, admin_password = await create_admin()
    admin_headers = await _login_headers(client, admin.email, admin_password)

    create_resp = await client.post(
        "/api/v1/admin/roles",
        headers=admin_headers,
        json={"name": "Moderator", "description": "Keeps the peace"},
    )
    assert create_resp.status_code == 201
    role = create_resp.json()["data"]
    assert role["name"] == "Moderator"
    assert role["protected"] is False

    dup_resp = await client.post("/api/v1/admin/roles", headers=admin_headers, json={"name": "moderator"})
    assert dup_resp.status_code == 409
    assert dup_resp.json()["message"] == "Role already exists: moderator"

    update_resp = await client.put(
        f"/api/v1/admin/roles/{role['id']}",
        headers=admin_headers,
        json={"name": "Community Moderator"},
    )
    assert update_resp.status_code == 200
    assert update_resp.json()["data"]["name"] == "Community Moderator"
    assert update_resp.json()["data"]["description"] == "Keeps the peace"

    # New roles are immediately usable at registration
    member, _ = await create_user(roles=("community_moderator",))
    assert member.roles == ["Community Moderator"]

    held_resp = await client.delete(f"/api/v1/admin/roles/{role['id']}", headers=admin_headers)
    assert held_resp.status_code == 409
    assert held_resp.json()["message"] == (
        "Cannot delete role 'Community Moderator' as it is assigned to 1 user(s)"
    )

    await client.delete(f"/api/v1/admin/users/{member.id}", headers=admin_headers)
    delete_resp = await client.delete(f"/api/v1/admin/roles/{role['id']}", headers=admin_headers)
    assert delete_resp.status_code == 200

    names = (await client.get("/api/v1/roles/names")).json()["data"]
    assert "Community Moderator" not in names


async def test_default_roles_are_protected(client, create_admin):
    admin, admin_password = await create_admin()
    admin_headers = await _login_headers(client, admin.email, admin_password)
    roles = {r["name"]: r["id"] for r in (await client.get("/api/v1/roles")).json()["data"]}

    business = await client.delete(f"/api/v1/admin/roles/{roles['Business Owner']}", headers=admin_headers)
    assert business.status_code == 409
    assert business.json()["message"] == "Cannot delete default role: Business Owner"

    rename = await client.put(
        f"/api/v1/admin/roles/{roles['Admin']}", headers=admin_headers, json={"name": "Root"}
    )
    assert rename.status_code == 409

    missing = await client.delete("/api/v1/admin/roles/999", headers=admin_headers)
    assert missing.status_code == 404


async def test_non_admin_forbidden(client, create_user):
    user, password = await create_user(roles=("General User", "Business Owner"))
    headers = await _login_headers(client, user.email, password)

    resp = await client.get("/api/v1/admin/users", headers=headers)
    assert resp.status_code == 403
    assert resp.json() == {"success": False, "message": "FORBIDDEN_ADMIN_ONLY"}

    create_resp = await client.post("/api/v1/admin/roles", headers=headers, json={"name": "Hacker"})
    assert create_resp.status_code == 403


async def test_admin_routes_require_token(client):
    resp = await client.get("/api/v1/admin/users")
    assert resp.status_code == 401
    assert resp.json()["message"] == "AUTH_REQUIRED"


async def test_unexpected_errors_are_masked(client, services, create_admin, monkeypatch):
    admin, admin_password = await create_admin()
    admin_headers = await _login_headers(client, admin.email, admin_password)

    async def explode():
        raise RuntimeError("database on fire")

    monkeypatch.setattr(services.users, "list_all", explode)

    resp = await client.get("/api/v1/admin/users", headers=admin_headers)
    assert resp.status_code == 500
    assert resp.json() == {
        "success": False,
        "message": "An unexpected error occurred. Please try again later.",
    }
    assert "on fire" not in resp.text
