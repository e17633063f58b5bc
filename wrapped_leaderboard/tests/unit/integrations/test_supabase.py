import httpx
import pytest

from wrapped_leaderboard.core.errors import StorageWriteFailed
from wrapped_leaderboard.integrations.supabase import (
    SupabaseAuthClient,
    SupabaseStorage,
    principal_from_user,
)

BASE_URL = "https://project.supabase.co"

USER_JSON = {
    "id": "6f1c1f1e-0000-4000-8000-000000000001",
    "email": "octo@example.com",
    "app_metadata": {"provider": "github"},
    "user_metadata": {"user_name": "octocat", "name": "The Octocat"},
    "identities": [{"provider": "github", "identity_data": {}}],
}


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestPrincipalFromUser:
    def test_full_payload(self):
        principal = principal_from_user(USER_JSON)
        assert principal.id == USER_JSON["id"]
        assert principal.email == "octo@example.com"
        assert principal.provider == "github"
        assert principal.user_name == "octocat"

    def test_falls_back_to_app_metadata_and_name(self):
        principal = principal_from_user(
            {"id": "u1", "app_metadata": {"provider": "twitter"}, "user_metadata": {"name": "jack"}}
        )
        assert principal.provider == "twitter"
        assert principal.user_name == "jack"
        assert principal.email is None


class TestSupabaseAuthClient:
    @pytest.mark.asyncio
    async def test_valid_token(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["apikey"] = request.headers.get("apikey")
            return httpx.Response(200, json=USER_JSON)

        async with _client(handler) as http:
            principal = await SupabaseAuthClient(BASE_URL + "/", "anon-key", http).verify("access-token")

        assert principal.id == USER_JSON["id"]
        assert seen == {
            "url": f"{BASE_URL}/auth/v1/user",
            "auth": "Bearer access-token",
            "apikey": "anon-key",
        }

    @pytest.mark.asyncio
    async def test_rejected_token(self):
        async with _client(lambda request: httpx.Response(401, json={"msg": "invalid JWT"})) as http:
            assert await SupabaseAuthClient(BASE_URL, "anon-key", http).verify("expired") is None

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as http:
            assert await SupabaseAuthClient(BASE_URL, None, http).verify("token") is None

    @pytest.mark.asyncio
    async def test_unexpected_payload(self):
        async with _client(lambda request: httpx.Response(200, json={"no": "id"})) as http:
            assert await SupabaseAuthClient(BASE_URL, None, http).verify("token") is None


class TestSupabaseStorage:
    @pytest.mark.asyncio
    async def test_upload_returns_public_url(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["upsert"] = request.headers["x-upsert"]
            seen["content_type"] = request.headers["Content-Type"]
            seen["body"] = request.content
            return httpx.Response(200, json={"Key": "screenshots/123-abc.png"})

        async with _client(handler) as http:
            storage = SupabaseStorage(BASE_URL, "service-key", "screenshots", http)
            url = await storage.upload("123-abc.png", b"png-bytes", "image/png")

        assert url == f"{BASE_URL}/storage/v1/object/public/screenshots/123-abc.png"
        assert seen == {
            "method": "POST",
            "url": f"{BASE_URL}/storage/v1/object/screenshots/123-abc.png",
            "upsert": "false",
            "content_type": "image/png",
            "body": b"png-bytes",
        }

    @pytest.mark.asyncio
    async def test_existing_object_is_a_failure(self):
        async with _client(lambda request: httpx.Response(409, json={"error": "Duplicate"})) as http:
            storage = SupabaseStorage(BASE_URL, "service-key", "screenshots", http)
            with pytest.raises(StorageWriteFailed):
                await storage.upload("123-abc.png", b"png-bytes", "image/png")

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(handler) as http:
            storage = SupabaseStorage(BASE_URL, "service-key", "screenshots", http)
            with pytest.raises(StorageWriteFailed):
                await storage.upload("123-abc.png", b"png-bytes", "image/png")
