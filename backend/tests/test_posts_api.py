"""
Quillboard Backend: Posts API Tests
====================================

What:  End-to-end tests of /api/posts through the FastAPI app, including the
       response envelope, 401 vs 403, multipart uploads and image serving.
"""

import json
import uuid

import pytest


async def _create(client, user, **fields):
    body = {"title": "Title", "content": "Content"}
    body.update(fields)
    response = await client.post("/api/posts", json=body, headers=user.headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def _create_category(client, admin, name):
    response = await client.post("/api/categories", json={"name": name}, headers=admin.headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestListEndpoint:

    @pytest.mark.asyncio
    async def test_empty_listing(self, test_client):
        response = await test_client.get("/api/posts")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": [],
            "currentPage": 1,
            "totalPages": 0,
            "totalCount": 0,
        }
        assert response.headers["X-Total-Count"] == "0"

    @pytest.mark.asyncio
    async def test_pagination(self, test_client, author):
        # PAGE_SIZE is 5 in the test environment
        for i in range(7):
            await _create(test_client, author, title=f"Post {i}")

        first = (await test_client.get("/api/posts")).json()
        second = (await test_client.get("/api/posts", params={"page": 2})).json()
        beyond = (await test_client.get("/api/posts", params={"page": 5})).json()

        assert len(first["data"]) == 5
        assert first["data"][0]["title"] == "Post 6"
        assert (first["totalPages"], first["totalCount"]) == (2, 7)
        assert [p["title"] for p in second["data"]] == ["Post 1", "Post 0"]
        assert beyond["data"] == []
        assert (beyond["currentPage"], beyond["totalPages"], beyond["totalCount"]) == (5, 2, 7)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page", ["abc", "0", "-2"])
    async def test_unusable_page_means_first_page(self, test_client, author, page):
        await _create(test_client, author)

        body = (await test_client.get("/api/posts", params={"page": page})).json()

        assert body["currentPage"] == 1
        assert len(body["data"]) == 1

    @pytest.mark.asyncio
    async def test_search_and_category(self, test_client, author, admin):
        python = await _create_category(test_client, admin, "Python")
        await _create(test_client, author, title="FastAPI tips", categories=[python["id"]])
        await _create(test_client, author, title="Bread baking", content="Use fast yeast")
        await _create(test_client, author, title="Gardening")

        searched = (await test_client.get("/api/posts", params={"search": "FAST"})).json()
        filtered = (await test_client.get("/api/posts", params={"category": python["id"]})).json()
        both = (await test_client.get("/api/posts", params={"search": "fast", "category": python["id"]})).json()

        assert {p["title"] for p in searched["data"]} == {"FastAPI tips", "Bread baking"}
        assert [p["title"] for p in filtered["data"]] == ["FastAPI tips"]
        assert both["totalCount"] == 1

    @pytest.mark.asyncio
    async def test_category_without_posts(self, test_client, author, admin):
        empty = await _create_category(test_client, admin, "Empty")
        await _create(test_client, author)

        body = (await test_client.get("/api/posts", params={"category": empty["id"]})).json()

        assert (body["data"], body["totalPages"], body["totalCount"]) == ([], 0, 0)


class TestCreateEndpoint:

    @pytest.mark.asyncio
    async def test_requires_token(self, test_client):
        response = await test_client.post("/api/posts", json={"title": "T", "content": "C"})

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "unauthenticated"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_rejects_bad_token(self, test_client):
        response = await test_client.post(
            "/api/posts",
            json={"title": "T", "content": "C"},
            headers={"Authorization": "Bearer not.a.token"},
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_author_from_token_not_body(self, test_client, author, other_user):
        data = await _create(
            test_client,
            author,
            author={"id": str(other_user.id), "name": "Impostor"},
            createdAt="1999-01-01T00:00:00Z",
        )

        assert data["author"] == {"id": str(author.id), "name": "Ada Author"}
        assert not data["createdAt"].startswith("1999")

    @pytest.mark.asyncio
    async def test_round_trip(self, test_client, author):
        created = await _create(test_client, author, title="Hello", content="World", excerpt="Hi")

        response = await test_client.get(f"/api/posts/{created['id']}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert (data["title"], data["content"], data["excerpt"]) == ("Hello", "World", "Hi")
        assert data["categories"] == []
        assert data["featuredImage"] is None
        assert {"createdAt", "updatedAt"} <= set(data)

    @pytest.mark.asyncio
    async def test_validation_error_envelope(self, test_client, author):
        response = await test_client.post(
            "/api/posts", json={"title": "x" * 101, "content": "C"}, headers=author.headers
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["field"] == "title"
        assert body["requestId"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_invalid_json(self, test_client, author):
        response = await test_client.post(
            "/api/posts",
            content=b"{not json",
            headers={**author.headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_multipart_upload_is_served_back(self, test_client, author, admin, png_bytes):
        python = await _create_category(test_client, admin, "Python")

        response = await test_client.post(
            "/api/posts",
            data={"title": "With picture", "content": "C", "categories": json.dumps([python["id"]])},
            files={"image": ("cover.png", png_bytes, "image/png")},
            headers=author.headers,
        )

        assert response.status_code == 201, response.text
        data = response.json()["data"]
        assert data["featuredImage"].startswith("/uploads/")
        assert [c["name"] for c in data["categories"]] == ["Python"]

        image = await test_client.get(data["featuredImage"])
        assert image.status_code == 200
        assert image.content == png_bytes
        assert image.headers["content-type"] == "image/png"

    @pytest.mark.asyncio
    async def test_disallowed_upload_creates_nothing(self, test_client, author, png_bytes, stored_files):
        response = await test_client.post(
            "/api/posts",
            data={"title": "Sneaky", "content": "C"},
            files={"image": ("payload.exe", png_bytes, "application/octet-stream")},
            headers=author.headers,
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "image"
        assert (await test_client.get("/api/posts")).json()["totalCount"] == 0
        assert stored_files() == []

    @pytest.mark.asyncio
    async def test_mismatched_content_type_rejected(self, test_client, author, png_bytes):
        response = await test_client.post(
            "/api/posts",
            data={"title": "T", "content": "C"},
            files={"image": ("cover.png", png_bytes, "image/jpeg")},
            headers=author.headers,
        )
        assert response.status_code == 400


class TestSinglePostEndpoints:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("post_id", ["not-a-uuid", str(uuid.uuid4())])
    async def test_missing_post_is_404(self, test_client, post_id):
        response = await test_client.get(f"/api/posts/{post_id}")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_update_by_owner(self, test_client, author):
        created = await _create(test_client, author, title="Before", content="Same")

        response = await test_client.put(
            f"/api/posts/{created['id']}", json={"title": "After"}, headers=author.headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert (data["title"], data["content"]) == ("After", "Same")
        assert data["createdAt"] == created["createdAt"]
        assert data["updatedAt"] != created["updatedAt"]

    @pytest.mark.asyncio
    async def test_update_by_other_user_is_403_and_unchanged(self, test_client, author, other_user):
        created = await _create(test_client, author, title="Original")

        response = await test_client.put(
            f"/api/posts/{created['id']}", json={"title": "Defaced"}, headers=other_user.headers
        )

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"
        current = (await test_client.get(f"/api/posts/{created['id']}")).json()["data"]
        assert current["title"] == "Original"

    @pytest.mark.asyncio
    async def test_update_without_token_is_401(self, test_client, author):
        created = await _create(test_client, author)
        response = await test_client.put(f"/api/posts/{created['id']}", json={"title": "x"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_admin_can_delete_any_post(self, test_client, author, admin):
        created = await _create(test_client, author)

        response = await test_client.delete(f"/api/posts/{created['id']}", headers=admin.headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"id": created["id"], "deleted": True}}
        assert (await test_client.get(f"/api/posts/{created['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_by_other_user_is_403(self, test_client, author, other_user):
        created = await _create(test_client, author)

        response = await test_client.delete(f"/api/posts/{created['id']}", headers=other_user.headers)

        assert response.status_code == 403
        assert (await test_client.get(f"/api/posts/{created['id']}")).status_code == 200

    @pytest.mark.asyncio
    async def test_delete_removes_comments(self, test_client, author, other_user):
        created = await _create(test_client, author)
        await test_client.post(
            f"/api/posts/{created['id']}/comments", json={"content": "Nice"}, headers=other_user.headers
        )

        await test_client.delete(f"/api/posts/{created['id']}", headers=author.headers)

        assert (await test_client.get(f"/api/posts/{created['id']}/comments")).status_code == 404

    @pytest.mark.asyncio
    async def test_multipart_update_replaces_image(self, test_client, author, png_bytes, stored_files):
        create = await test_client.post(
            "/api/posts",
            data={"title": "T", "content": "C"},
            files={"image": ("a.png", png_bytes, "image/png")},
            headers=author.headers,
        )
        created = create.json()["data"]

        response = await test_client.put(
            f"/api/posts/{created['id']}",
            data={"excerpt": "new picture"},
            files={"image": ("b.webp", b"RIFF" + b"\x00" * 32, "image/webp")},
            headers=author.headers,
        )

        assert response.status_code == 200, response.text
        data = response.json()["data"]
        assert data["featuredImage"].endswith(".webp")
        assert data["title"] == "T"
        assert [p.suffix for p in stored_files()] == [".webp"]
        assert (await test_client.get(created["featuredImage"])).status_code == 404


class TestAmbientEndpoints:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_envelope(self, test_client):
        response = await test_client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_client_request_id_is_echoed(self, test_client):
        response = await test_client.get("/api/posts", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"

    @pytest.mark.asyncio
    async def test_missing_upload_is_404(self, test_client):
        response = await test_client.get("/uploads/2020/01/01/missing.png")
        assert response.status_code == 404
