"""
Supabase integration: identity verification and screenshot object storage.

Both clients speak Supabase's REST endpoints over a shared ``httpx.AsyncClient``.
The service never authenticates users itself; it only asks Supabase whether a
bearer token belongs to a live session and trusts the principal it returns.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from wrapped_leaderboard.core.errors import StorageWriteFailed
from wrapped_leaderboard.models.dtos import Principal

logger = logging.getLogger(__name__)


def principal_from_user(user: Dict[str, Any]) -> Principal:
    """Build a Principal from the JSON body of ``GET /auth/v1/user``."""
    identities = user.get("identities") or []
    first_identity = identities[0] if identities and isinstance(identities[0], dict) else {}
    metadata = user.get("user_metadata") or {}
    provider = first_identity.get("provider") or (user.get("app_metadata") or {}).get("provider")
    return Principal(
        id=str(user["id"]),
        email=user.get("email"),
        provider=provider,
        user_name=metadata.get("user_name") or metadata.get("name"),
    )


class SupabaseAuthClient:
    """
    Verifies Supabase access tokens.
    """

    def __init__(self, base_url: str, anon_key: Optional[str], http_client: httpx.AsyncClient):
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self._http = http_client

    async def verify(self, access_token: str) -> Optional[Principal]:
        """
        Resolve an access token to a principal.

        Args:
            access_token: Bearer token presented by the client.

        Returns:
            Optional[Principal]: The verified principal, or None if the token is not valid.
        """
        headers = {"Authorization": f"Bearer {access_token}"}
        if self.anon_key:
            headers["apikey"] = self.anon_key
        try:
            response = await self._http.get(f"{self.base_url}/auth/v1/user", headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Identity verification request failed: {e}")
            return None

        if response.status_code != 200:
            logger.info(f"Identity verification rejected token (status {response.status_code})")
            return None

        try:
            return principal_from_user(response.json())
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Unexpected identity payload: {e}")
            return None


class SupabaseStorage:
    """
    Write-once uploads into a public Supabase Storage bucket.
    """

    def __init__(self, base_url: str, service_key: Optional[str], bucket: str, http_client: httpx.AsyncClient):
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.bucket = bucket
        self._http = http_client

    def public_url(self, key: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(key)}"

    async def upload(self, key: str, data: bytes, content_type: str) -> str:
        """
        Upload an object without overwriting and return its public URL.

        Raises:
            StorageWriteFailed: On transport errors or any non-2xx answer.
        """
        headers = {
            "Content-Type": content_type,
            "x-upsert": "false",
        }
        if self.service_key:
            headers["Authorization"] = f"Bearer {self.service_key}"
            headers["apikey"] = self.service_key

        url = f"{self.base_url}/storage/v1/object/{self.bucket}/{quote(key)}"
        try:
            response = await self._http.post(url, content=data, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Upload of {key} failed: {e}")
            raise StorageWriteFailed(details={"key": key, "reason": str(e)}) from e

        if response.is_error:
            logger.error(f"Upload of {key} rejected with status {response.status_code}: {response.text[:200]}")
            raise StorageWriteFailed(details={"key": key, "status": response.status_code})

        logger.info(f"Uploaded screenshot {key} ({len(data)} bytes)")
        return self.public_url(key)
