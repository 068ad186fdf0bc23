"""书籍模块功能测试

覆盖端点：
- GET /books, GET /books?owner=me
- GET /books/{id}
- POST /books（multipart）
- PATCH /books/{id}
- DELETE /books/{id}
"""

import pytest
from httpx import AsyncClient

from bookswap.server.models.book import Book


def _form(**overrides) -> dict:
    form = {
        "title": "Foundation",
        "author": "Isaac Asimov",
        "condition": "Like New",
        "description": "Hardcover first printing",
    }
    form.update(overrides)
    return form


class TestCreateBook:

    @pytest.mark.asyncio
    async def test_create_book(self, client: AsyncClient, bob, bob_headers):
        """上架书籍，调用者即 owner"""
        resp = await client.post("/books", data=_form(), headers=bob_headers)
        assert resp.status_code == 201
        data = resp.json()
        assert data["title"] == "Foundation"
        assert data["condition"] == "Like New"
        assert data["owner"]["id"] == bob.id
        assert data["owner_id"] == bob.id
        assert data["image"] is None

    @pytest.mark.asyncio
    async def test_create_book_with_image(self, client: AsyncClient, bob_headers, upload_dir):
        """带封面上传 → 存到 UPLOAD_DIR，返回相对 URL"""
        resp = await client.post(
            "/books",
            data=_form(),
            files={"image": ("cover.png", b"\x89PNG fake", "image/png")},
            headers=bob_headers,
        )
        assert resp.status_code == 201
        image = resp.json()["image"]
        assert image.startswith("/uploads/")
        assert image.endswith(".png")
        assert (upload_dir / image.rsplit("/", 1)[1]).read_bytes() == b"\x89PNG fake"

    @pytest.mark.asyncio
    async def test_create_book_non_image_upload(self, client: AsyncClient, bob_headers):
        resp = await client.post(
            "/books",
            data=_form(),
            files={"image": ("notes.txt", b"hello", "text/plain")},
            headers=bob_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_create_book_invalid_condition(self, client: AsyncClient, bob_headers):
        """无效成色 → 422"""
        resp = await client.post("/books", data=_form(condition="Mint"), headers=bob_headers)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_create_book_missing_field(self, client: AsyncClient, bob_headers):
        form = _form()
        del form["author"]
        resp = await client.post("/books", data=form, headers=bob_headers)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_create_book_no_token(self, client: AsyncClient):
        """无 Token → 401"""
        resp = await client.post("/books", data=_form())
        assert resp.status_code == 401


class TestListBooks:

    @pytest.mark.asyncio
    async def test_list_all_is_public(self, client: AsyncClient, dune: Book):
        resp = await client.get("/books")
        assert resp.status_code == 200
        data = resp.json()
        assert [b["id"] for b in data] == [dune.id]
        assert data[0]["owner"]["name"] == "Alice"

    @pytest.mark.asyncio
    async def test_list_mine(self, client: AsyncClient, dune: Book, alice_headers, bob_headers):
        await client.post("/books", data=_form(), headers=bob_headers)

        mine = (await client.get("/books", params={"owner": "me"}, headers=bob_headers)).json()
        assert [b["title"] for b in mine] == ["Foundation"]

        everything = (await client.get("/books", headers=bob_headers)).json()
        assert {b["title"] for b in everything} == {"Dune", "Foundation"}

    @pytest.mark.asyncio
    async def test_list_mine_requires_token(self, client: AsyncClient):
        resp = await client.get("/books", params={"owner": "me"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_list_invalid_owner_param(self, client: AsyncClient):
        resp = await client.get("/books", params={"owner": "someone"})
        assert resp.status_code == 422


class TestGetBook:

    @pytest.mark.asyncio
    async def test_get_book(self, client: AsyncClient, dune: Book, alice):
        resp = await client.get(f"/books/{dune.id}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["title"] == "Dune"
        assert data["author"] == "Frank Herbert"
        assert data["owner"] == {"id": alice.id, "name": "Alice", "email": "alice@example.com"}

    @pytest.mark.asyncio
    async def test_get_missing_book(self, client: AsyncClient):
        resp = await client.get("/books/does-not-exist")
        assert resp.status_code == 404
        assert resp.json()["code"] == "NOT_FOUND"


class TestUpdateBook:

    @pytest.mark.asyncio
    async def test_owner_updates(self, client: AsyncClient, dune: Book, alice_headers):
        resp = await client.patch(
            f"/books/{dune.id}",
            json={"condition": "Fair", "description": "Spine cracked"},
            headers=alice_headers,
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["condition"] == "Fair"
        assert data["description"] == "Spine cracked"
        assert data["title"] == "Dune"

    @pytest.mark.asyncio
    async def test_non_owner_forbidden(self, client: AsyncClient, dune: Book, bob_headers):
        """非 owner 编辑 → 403"""
        resp = await client.patch(f"/books/{dune.id}", json={"title": "Mine now"}, headers=bob_headers)
        assert resp.status_code == 403
        assert resp.json()["code"] == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_update_missing_book(self, client: AsyncClient, alice_headers):
        resp = await client.patch("/books/nope", json={"title": "x"}, headers=alice_headers)
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_blank_title_rejected(self, client: AsyncClient, dune: Book, alice_headers):
        resp = await client.patch(f"/books/{dune.id}", json={"title": "   "}, headers=alice_headers)
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_ERROR"


class TestDeleteBook:

    @pytest.mark.asyncio
    async def test_owner_deletes(self, client: AsyncClient, dune: Book, alice_headers):
        resp = await client.delete(f"/books/{dune.id}", headers=alice_headers)
        assert resp.status_code == 204
        assert (await client.get(f"/books/{dune.id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_non_owner_cannot_delete(self, client: AsyncClient, dune: Book, bob_headers):
        resp = await client.delete(f"/books/{dune.id}", headers=bob_headers)
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_with_pending_request(self, client: AsyncClient, dune: Book, alice_headers, bob_headers):
        """仍有 pending 请求 → 409，书籍保留"""
        await client.post(f"/books/{dune.id}/request", headers=bob_headers)
        resp = await client.delete(f"/books/{dune.id}", headers=alice_headers)
        assert resp.status_code == 409
        assert resp.json()["code"] == "CONFLICT"
        assert (await client.get(f"/books/{dune.id}")).status_code == 200

    @pytest.mark.asyncio
    async def test_delete_after_requests_resolved(self, client: AsyncClient, dune: Book, alice_headers, bob_headers):
        """请求已结束 → 可以下架，相关请求一并移除"""
        req = (await client.post(f"/books/{dune.id}/request", headers=bob_headers)).json()
        await client.patch(f"/requests/{req['id']}", json={"status": "declined"}, headers=alice_headers)

        resp = await client.delete(f"/books/{dune.id}", headers=alice_headers)
        assert resp.status_code == 204

        views = (await client.get("/requests", headers=bob_headers)).json()
        assert views["outgoing"] == []

    @pytest.mark.asyncio
    async def test_delete_removes_uploaded_image(self, client: AsyncClient, bob_headers, upload_dir):
        created = (await client.post(
            "/books",
            data=_form(),
            files={"image": ("cover.jpg", b"jpeg-bytes", "image/jpeg")},
            headers=bob_headers,
        )).json()
        stored = upload_dir / created["image"].rsplit("/", 1)[1]
        assert stored.exists()

        await client.delete(f"/books/{created['id']}", headers=bob_headers)
        assert not stored.exists()
