"""认证模块功能测试

覆盖端点：
- POST /auth/signup
- POST /auth/login
- GET /auth/profile
- POST /auth/logout
"""

import pytest
from httpx import AsyncClient


class TestSignup:

    @pytest.mark.asyncio
    async def test_signup_success(self, client: AsyncClient):
        """注册成功 → 201，只返回用户信息，不含 Token"""
        resp = await client.post("/auth/signup", json={
            "name": "New Reader",
            "email": "new@example.com",
            "password": "123456",
        })
        assert resp.status_code == 201
        data = resp.json()
        assert data["user"]["email"] == "new@example.com"
        assert data["user"]["name"] == "New Reader"
        assert "token" not in data

    @pytest.mark.asyncio
    async def test_signup_duplicate_email(self, client: AsyncClient):
        """重复邮箱 → 409"""
        payload = {"name": "Dup", "email": "dup@example.com", "password": "123456"}
        await client.post("/auth/signup", json=payload)
        resp = await client.post("/auth/signup", json=payload)
        assert resp.status_code == 409
        assert resp.json()["code"] == "CONFLICT"

    @pytest.mark.asyncio
    async def test_signup_short_password(self, client: AsyncClient):
        """密码太短 → 422"""
        resp = await client.post("/auth/signup", json={
            "name": "Short",
            "email": "short@example.com",
            "password": "123",
        })
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_signup_invalid_email(self, client: AsyncClient):
        """无效邮箱格式 → 422"""
        resp = await client.post("/auth/signup", json={
            "name": "Bad",
            "email": "not-an-email",
            "password": "123456",
        })
        assert resp.status_code == 422


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, alice):
        """正确邮箱+密码 → 返回 token + user"""
        resp = await client.post("/auth/login", json={
            "email": "alice@example.com",
            "password": "password123",
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["token"]
        assert data["token_type"] == "bearer"
        assert data["user"]["id"] == alice.id

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, alice):
        """密码错误 → 401"""
        resp = await client.post("/auth/login", json={
            "email": "alice@example.com",
            "password": "wrongpassword",
        })
        assert resp.status_code == 401
        assert resp.json()["code"] == "AUTH_ERROR"

    @pytest.mark.asyncio
    async def test_login_nonexistent_user(self, client: AsyncClient):
        """不存在的用户 → 401"""
        resp = await client.post("/auth/login", json={
            "email": "noone@example.com",
            "password": "123456",
        })
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_signup_then_login(self, client: AsyncClient):
        await client.post("/auth/signup", json={
            "name": "Round Trip",
            "email": "Round@Example.com",
            "password": "password123",
        })
        resp = await client.post("/auth/login", json={
            "email": "round@example.com",
            "password": "password123",
        })
        assert resp.status_code == 200


class TestProfile:

    @pytest.mark.asyncio
    async def test_profile(self, client: AsyncClient, alice_headers):
        resp = await client.get("/auth/profile", headers=alice_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["email"] == "alice@example.com"
        assert data["name"] == "Alice"

    @pytest.mark.asyncio
    async def test_profile_no_token(self, client: AsyncClient):
        """无 Token → 401"""
        resp = await client.get("/auth/profile")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_profile_garbage_token(self, client: AsyncClient):
        resp = await client.get("/auth/profile", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401


class TestLogout:

    @pytest.mark.asyncio
    async def test_logout_revokes_token(self, client: AsyncClient, alice_headers):
        """登出后同一 Token 失效"""
        resp = await client.post("/auth/logout", headers=alice_headers)
        assert resp.status_code == 200

        resp = await client.get("/auth/profile", headers=alice_headers)
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_logout_does_not_affect_other_tokens(self, client: AsyncClient, alice, alice_headers):
        from tests.conftest import headers_for

        other = headers_for(alice)
        await client.post("/auth/logout", headers=alice_headers)
        resp = await client.get("/auth/profile", headers=other)
        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_logout_no_token(self, client: AsyncClient):
        resp = await client.post("/auth/logout")
        assert resp.status_code == 401


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
