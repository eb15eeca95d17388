"""Client for the external identity service that issues bearer tokens."""

import asyncio
import logging
from dataclasses import dataclass

import httpx

from app.core.config import settings
from app.core.exceptions import AuthenticationError, IdentityServiceError

logger = logging.getLogger(__name__)


@dataclass
class IdentityUser:
    """Account data returned for a valid token."""

    id: str
    email: str | None = None


class IdentityClient:
    """Validates access tokens against the identity service user endpoint."""

    USER_ENDPOINT = "/auth/v1/user"
    RETRY_STATUSES = (502, 503, 504)

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ):
        self.client = httpx.AsyncClient(
            base_url=base_url or settings.auth_service_url,
            timeout=httpx.Timeout(timeout or settings.auth_timeout_seconds),
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            headers={
                "apikey": api_key or settings.auth_service_key,
                "Accept": "application/json",
            },
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def get_user(
        self, token: str, max_retries: int = 2, base_delay: float = 0.25
    ) -> IdentityUser:
        """Resolve a bearer token to the account that owns it."""
        retries = 0
        while True:
            try:
                response = await self.client.get(
                    self.USER_ENDPOINT,
                    headers={"Authorization": f"Bearer {token}"},
                )
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                retries += 1
                if retries > max_retries:
                    logger.error(f"Identity service unreachable: {e!s}")
                    raise IdentityServiceError(503, f"Network error: {e!s}")
                await asyncio.sleep(base_delay * (2**retries))
                continue

            if response.status_code in self.RETRY_STATUSES:
                retries += 1
                if retries > max_retries:
                    raise IdentityServiceError(
                        response.status_code,
                        f"Gateway error after {max_retries} retries",
                    )
                logger.warning(
                    f"Identity service returned {response.status_code}. "
                    f"Retry {retries}/{max_retries}"
                )
                await asyncio.sleep(base_delay * (2**retries))
                continue

            if response.status_code in (401, 403):
                raise AuthenticationError("Invalid or expired token")

            if response.status_code >= 400:
                logger.error(
                    f"Identity service error: {response.status_code} - {response.text[:200]}"
                )
                raise IdentityServiceError(response.status_code, response.text[:200])

            try:
                data = response.json()
            except ValueError as e:
                raise IdentityServiceError(502, f"Invalid JSON response: {e!s}")

            user_id = data.get("id") if isinstance(data, dict) else None
            if not user_id:
                raise AuthenticationError("Token is not bound to a user")

            return IdentityUser(id=user_id, email=data.get("email"))

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()


async def get_identity_client():
    """FastAPI dependency for identity client with proper cleanup."""
    client = IdentityClient()
    try:
        yield client
    finally:
        await client.close()
