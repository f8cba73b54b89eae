"""
HTTP registration client - Implements RegistrationApi over httpx.

Maps API responses back to domain exceptions so the gate never sees
HTTP details.
"""

import logging

import httpx

from src.client.exceptions import ServiceUnavailable
from src.config.settings import get_settings
from src.domain.exceptions import InvalidAccountDetails, InvalidToken, UsernameTaken

logger = logging.getLogger(__name__)


class HttpRegistrationApi:
    """
    Implements RegistrationApi protocol via httpx.

    Uses structural subtyping - no explicit inheritance from Protocol.
    An existing httpx.Client (e.g. FastAPI's TestClient) may be passed in;
    otherwise one is built from settings.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        if client is None:
            settings = get_settings()
            client = httpx.Client(
                base_url=base_url or settings.api_base_url,
                timeout=timeout if timeout is not None else settings.client_timeout_seconds,
            )
        self._client = client

    def verify_token(self, token: str) -> bool:
        """
        Ask the server whether a token exists.

        Raises:
            ServiceUnavailable: On transport failure or a non-2xx answer
        """
        try:
            response = self._client.get("/v1/token/verify", params={"token": token})
            response.raise_for_status()
            return bool(response.json()["valid"])
        except (httpx.HTTPError, ValueError, KeyError) as e:
            raise ServiceUnavailable("Token verification failed") from e

    def create_account(self, username: str, password: str, token: str) -> None:
        """
        Submit a registration request.

        Raises:
            InvalidToken: 403 from the server
            UsernameTaken: 409 from the server
            InvalidAccountDetails: 422, the server refused the username or password
            ServiceUnavailable: Transport failure or any other status
        """
        try:
            response = self._client.post(
                "/v1/register",
                json={"username": username, "password": password, "token": token},
            )
        except httpx.HTTPError as e:
            raise ServiceUnavailable("Account creation failed") from e

        if response.status_code == httpx.codes.CREATED:
            return
        if response.status_code == httpx.codes.FORBIDDEN:
            raise InvalidToken(token)
        if response.status_code == httpx.codes.CONFLICT:
            raise UsernameTaken(username)
        if response.status_code == httpx.codes.UNPROCESSABLE_ENTITY:
            raise InvalidAccountDetails(username)

        logger.error("Unexpected registration response: %s", response.status_code)
        raise ServiceUnavailable(f"Unexpected status {response.status_code}")

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpRegistrationApi":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
