"""
Tests for /api/v1/auth routes
"""

from conftest import DEFAULT_PASSWORD

LOGIN_URL = "/api/v1/auth/login"


class TestLoginRoute:
    async def test_login_success(self, seeded, client):
        response = await client.post(LOGIN_URL, json={"username": "companyadmin", "password": "admin123"})

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "Bearer"
        assert body["expires_in"] == 86400
        assert body["user"]["username"] == "companyadmin"
        assert body["user"]["tenant_name"] == "Acme Corp"
        assert body["user"]["roles"] == ["COMPANY_ADMIN"]
        assert "MANAGE_USERS" in body["user"]["permissions"]
        assert body["user"]["last_login"] is not None

    async def test_login_with_tenant(self, seeded, client):
        response = await client.post(
            LOGIN_URL, json={"username": "clientuser", "password": "client123", "tenant_id": seeded.acme.id}
        )
        assert response.status_code == 200
        assert response.json()["user"]["tenant_id"] == seeded.acme.id

    async def test_wrong_password(self, seeded, client):
        response = await client.post(LOGIN_URL, json={"username": "clientuser", "password": "nope-nope"})

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        error = response.json()["error"]
        assert error["message"] == "Invalid credentials"
        assert error["error_code"] == "AUTH_INVALID_CREDENTIALS"
        assert error["path"] == LOGIN_URL

    async def test_invalid_tenant(self, seeded, client):
        response = await client.post(
            LOGIN_URL, json={"username": "clientuser", "password": "client123", "tenant_id": "nope"}
        )
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid tenant ID"

    async def test_lockout_over_http(self, seeded, client):
        for _ in range(5):
            response = await client.post(LOGIN_URL, json={"username": "clientuser", "password": "nope-nope"})
            assert response.status_code == 401

        response = await client.post(LOGIN_URL, json={"username": "clientuser", "password": "client123"})
        assert response.status_code == 401
        error = response.json()["error"]
        assert error["error_code"] == "AUTH_ACCOUNT_LOCKED"
        assert error["message"].startswith("Account is locked. Try again after ")
        assert "locked_until" in error["details"]

    async def test_payload_validation(self, client):
        response = await client.post(LOGIN_URL, json={"username": "ab"})
        assert response.status_code == 422
        assert response.json()["error"]["message"] == "Validation error"

    async def test_oauth2_form_login(self, seeded, client):
        response = await client.post(
            "/api/v1/auth/token", data={"username": "superadmin", "password": "admin123"}
        )
        assert response.status_code == 200
        assert response.json()["token_type"] == "Bearer"


class TestProfileRoutes:
    async def test_requires_token(self, client):
        response = await client.get("/api/v1/auth/profile")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_rejects_garbage_token(self, client):
        response = await client.get("/api/v1/auth/profile", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Could not validate credentials"

    async def test_get_profile(self, seeded, client, headers_for):
        response = await client.get("/api/v1/auth/profile", headers=headers_for(seeded.users["companyadmin"]))

        assert response.status_code == 200
        body = response.json()
        assert body["username"] == "companyadmin"
        assert body["tenant_name"] == "Acme Corp"
        assert body["roles"][0]["name"] == "COMPANY_ADMIN"
        assert "VIEW_ROLES" in body["roles"][0]["permissions"]

    async def test_update_profile(self, seeded, client, headers_for):
        response = await client.patch(
            "/api/v1/auth/profile",
            json={"first_name": "Ada", "email": "ada@example.com"},
            headers=headers_for(seeded.users["clientuser"]),
        )
        assert response.status_code == 200
        assert response.json()["first_name"] == "Ada"
        assert response.json()["email"] == "ada@example.com"

    async def test_update_profile_username_conflict(self, seeded, client, headers_for):
        response = await client.patch(
            "/api/v1/auth/profile",
            json={"username": "superadmin"},
            headers=headers_for(seeded.users["clientuser"]),
        )
        assert response.status_code == 409

    async def test_change_password_flow(self, seeded, client, headers_for):
        headers = headers_for(seeded.users["clientuser"])

        response = await client.post(
            "/api/v1/auth/change-password",
            json={"current_password": "wrong-one", "new_password": DEFAULT_PASSWORD},
            headers=headers,
        )
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Current password is incorrect"

        response = await client.post(
            "/api/v1/auth/change-password",
            json={"current_password": "client123", "new_password": "alllowercase1"},
            headers=headers,
        )
        assert response.status_code == 400

        response = await client.post(
            "/api/v1/auth/change-password",
            json={"current_password": "client123", "new_password": DEFAULT_PASSWORD},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Password changed successfully"}

        response = await client.post(LOGIN_URL, json={"username": "clientuser", "password": DEFAULT_PASSWORD})
        assert response.status_code == 200
