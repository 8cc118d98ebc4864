"""Tests for the authentication endpoints."""

from talecraft.core.security import TokenType, create_refresh_token, verify_token


REGISTER_BODY = {
    "username": "alice",
    "email": "alice@example.com",
    "password": "password123",
}


class TestRegister:
    async def test_register_returns_access_token_and_cookie(self, client) -> None:
        response = await client.post("/api/auth/register", json=REGISTER_BODY)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Registration successful"
        assert body["data"]["user"]["username"] == "alice"
        assert "passwordHash" not in body["data"]["user"]

        payload = verify_token(body["data"]["accessToken"], TokenType.ACCESS)
        assert payload.user_id == body["data"]["user"]["id"]

        # Refresh token lives only in the cookie
        assert "refreshToken" not in body["data"]
        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith("refreshToken=")
        assert "HttpOnly" in set_cookie
        assert "samesite=strict" in set_cookie.lower()

    async def test_duplicate_email_is_conflict(self, client, seed) -> None:
        await seed.user("alice")
        response = await client.post(
            "/api/auth/register", json={**REGISTER_BODY, "username": "alice2"}
        )

        assert response.status_code == 409
        assert response.json() == {
            "success": False,
            "error": "This email is already registered.",
        }

    async def test_invalid_body(self, client) -> None:
        response = await client.post(
            "/api/auth/register",
            json={"username": "a!", "email": "not-an-email", "password": "short"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Validation failed"
        assert set(body["errors"]) == {"username", "email", "password"}


class TestLogin:
    async def test_login(self, client, seed) -> None:
        user = await seed.user("alice")
        response = await client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "password123"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["data"]["user"]["id"] == user.id
        assert response.cookies.get("refreshToken")

    async def test_wrong_password(self, client, seed) -> None:
        await seed.user("alice")
        response = await client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "wrong-password"},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid email or password"
        assert response.headers["www-authenticate"] == "Bearer"


class TestRefresh:
    async def test_refresh_from_cookie(self, client, seed) -> None:
        user = await seed.user("alice")
        token = create_refresh_token(user.id, user.email)

        response = await client.post(
            "/api/auth/refresh", headers={"Cookie": f"refreshToken={token}"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Token refreshed successfully"
        payload = verify_token(body["data"]["accessToken"], TokenType.ACCESS)
        assert payload.user_id == user.id

    async def test_missing_cookie(self, client) -> None:
        response = await client.post("/api/auth/refresh")

        assert response.status_code == 401
        assert response.json()["error"] == "Refresh token not found"

    async def test_access_token_is_not_a_refresh_token(self, client, seed, headers_for) -> None:
        user = await seed.user("alice")
        access = headers_for(user)["Authorization"].removeprefix("Bearer ")

        response = await client.post(
            "/api/auth/refresh", headers={"Cookie": f"refreshToken={access}"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid or expired refresh token"

    async def test_deleted_user(self, client) -> None:
        token = create_refresh_token(4242, "gone@example.com")

        response = await client.post(
            "/api/auth/refresh", headers={"Cookie": f"refreshToken={token}"}
        )

        assert response.status_code == 401


class TestSession:
    async def test_me(self, client, seed, headers_for) -> None:
        user = await seed.user("alice")
        response = await client.get("/api/auth/me", headers=headers_for(user))

        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "alice@example.com"

    async def test_me_requires_token(self, client) -> None:
        response = await client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["error"] == "Authentication required. Please provide a valid token."

    async def test_garbage_token(self, client) -> None:
        response = await client.get(
            "/api/auth/me", headers={"Authorization": "Bearer not.a.token"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid token. Please login again."

    async def test_logout_clears_cookie(self, client, seed, headers_for) -> None:
        user = await seed.user("alice")
        response = await client.post("/api/auth/logout", headers=headers_for(user))

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Logout successful"}
        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith("refreshToken=")
        assert "Max-Age=0" in set_cookie
