"""
Tests for /api/v1/roles and /api/v1/permissions routes
"""

ROLES_URL = "/api/v1/roles"


async def permission_ids(client, headers, *keys):
    response = await client.get("/api/v1/permissions/", headers=headers)
    by_key = {p["key"]: p["id"] for p in response.json()}
    return [by_key[key] for key in keys]


class TestPermissionCatalogue:
    async def test_company_admin_can_view(self, seeded, client, headers_for):
        response = await client.get("/api/v1/permissions/", headers=headers_for(seeded.users["companyadmin"]))
        assert response.status_code == 200
        keys = [p["key"] for p in response.json()]
        assert len(keys) == 10
        assert keys == sorted(keys)

    async def test_client_cannot_view(self, seeded, client, headers_for):
        response = await client.get("/api/v1/permissions/", headers=headers_for(seeded.users["clientuser"]))
        assert response.status_code == 403


class TestRoleRoutes:
    async def test_create_role(self, seeded, client, headers_for):
        headers = headers_for(seeded.users["superadmin"])
        ids = await permission_ids(client, headers, "VIEW_USERS", "VIEW_ROLES")

        response = await client.post(
            f"{ROLES_URL}/",
            json={"name": "AUDITOR", "tenant_id": seeded.acme.id, "permission_ids": ids},
            headers=headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "AUDITOR"
        assert body["tenant_id"] == seeded.acme.id
        assert sorted(p["key"] for p in body["permissions"]) == ["VIEW_ROLES", "VIEW_USERS"]

    async def test_company_admin_cannot_create(self, seeded, client, headers_for):
        response = await client.post(
            f"{ROLES_URL}/", json={"name": "AUDITOR"}, headers=headers_for(seeded.users["companyadmin"])
        )
        assert response.status_code == 403

    async def test_duplicate_role(self, seeded, client, headers_for):
        response = await client.post(
            f"{ROLES_URL}/", json={"name": "CLIENT"}, headers=headers_for(seeded.users["superadmin"])
        )
        assert response.status_code == 409

    async def test_unknown_permission(self, seeded, client, headers_for):
        response = await client.post(
            f"{ROLES_URL}/",
            json={"name": "AUDITOR", "permission_ids": [12345]},
            headers=headers_for(seeded.users["superadmin"]),
        )
        assert response.status_code == 404

    async def test_company_admin_list_is_tenant_scoped(self, seeded, client, headers_for):
        su = headers_for(seeded.users["superadmin"])
        await client.post(f"{ROLES_URL}/", json={"name": "ACME_ONLY", "tenant_id": seeded.acme.id}, headers=su)
        await client.post(f"{ROLES_URL}/", json={"name": "GLOBEX_ONLY", "tenant_id": seeded.globex.id}, headers=su)

        response = await client.get(f"{ROLES_URL}/", headers=headers_for(seeded.users["companyadmin"]))
        assert response.status_code == 200
        assert [r["name"] for r in response.json()["data"]] == ["ACME_ONLY"]

        response = await client.get(f"{ROLES_URL}/?limit=100", headers=su)
        assert response.json()["meta"]["total"] == 5

    async def test_get_role(self, seeded, client, headers_for):
        role_id = seeded.roles["COMPANY_ADMIN"].id
        response = await client.get(f"{ROLES_URL}/{role_id}", headers=headers_for(seeded.users["companyadmin"]))
        assert response.status_code == 200
        assert "MANAGE_USERS" in [p["key"] for p in response.json()["permissions"]]

    async def test_update_replaces_permissions(self, seeded, client, headers_for):
        headers = headers_for(seeded.users["superadmin"])
        ids = await permission_ids(client, headers, "VIEW_ROLES")
        role_id = seeded.roles["CLIENT"].id

        response = await client.patch(f"{ROLES_URL}/{role_id}", json={"permission_ids": ids}, headers=headers)
        assert response.status_code == 200
        assert [p["key"] for p in response.json()["permissions"]] == ["VIEW_ROLES"]

        response = await client.post(
            "/api/v1/auth/login", json={"username": "clientuser", "password": "client123"}
        )
        assert response.json()["user"]["permissions"] == ["VIEW_ROLES"]

    async def test_delete_role(self, seeded, client, headers_for):
        headers = headers_for(seeded.users["superadmin"])
        created = await client.post(f"{ROLES_URL}/", json={"name": "TEMP"}, headers=headers)
        role_id = created.json()["id"]

        response = await client.delete(f"{ROLES_URL}/{role_id}", headers=headers)
        assert response.status_code == 204

        response = await client.get(f"{ROLES_URL}/{role_id}", headers=headers)
        assert response.status_code == 404
