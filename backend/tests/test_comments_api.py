"""
Quillboard Backend: Comments API Tests
=======================================
"""

import uuid

import pytest


@pytest.fixture
def post_url():
    def _url(post_id):
        return f"/api/posts/{post_id}/comments"
    return _url


async def _create_post(client, user):
    response = await client.post("/api/posts", json={"title": "T", "content": "C"}, headers=user.headers)
    return response.json()["data"]["id"]


class TestComments:

    @pytest.mark.asyncio
    async def test_add_and_list_oldest_first(self, test_client, author, other_user, post_url):
        post_id = await _create_post(test_client, author)

        first = await test_client.post(post_url(post_id), json={"content": "First"}, headers=other_user.headers)
        await test_client.post(post_url(post_id), json={"content": "Second"}, headers=author.headers)

        assert first.status_code == 201
        created = first.json()["data"]
        assert created["postId"] == post_id
        assert created["author"] == {"id": str(other_user.id), "name": "Olly Other"}

        listing = await test_client.get(post_url(post_id))
        assert listing.status_code == 200
        assert [c["content"] for c in listing.json()["data"]] == ["First", "Second"]

    @pytest.mark.asyncio
    async def test_requires_token(self, test_client, author, post_url):
        post_id = await _create_post(test_client, author)
        response = await test_client.post(post_url(post_id), json={"content": "Hi"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_post(self, test_client, author, post_url):
        missing = str(uuid.uuid4())

        assert (await test_client.get(post_url(missing))).status_code == 404
        response = await test_client.post(post_url(missing), json={"content": "Hi"}, headers=author.headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   ", "x" * 1001])
    async def test_invalid_content(self, test_client, author, post_url, content):
        post_id = await _create_post(test_client, author)

        response = await test_client.post(post_url(post_id), json={"content": content}, headers=author.headers)

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "content"

    @pytest.mark.asyncio
    async def test_malformed_body(self, test_client, author, post_url):
        post_id = await _create_post(test_client, author)

        response = await test_client.post(
            post_url(post_id),
            content=b"[]",
            headers={**author.headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
