"""
Unit tests for API v1 routes.

Tests endpoint responses with mocked dependencies.
"""

from collections.abc import Generator
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.dependencies import (
    get_invitation_service,
    get_registration_service,
    get_verification_service,
)
from src.api.v1.routes import router
from src.config.settings import Settings, get_settings
from src.domain.exceptions import InvalidAccountDetails, InvalidToken, UsernameTaken
from src.domain.registration import (
    Invitation,
    InvitationService,
    RegistrationService,
    TokenVerificationService,
)

TOKEN = "11111111-1111-1111-1111-111111111111"


@pytest.fixture
def app() -> Generator[FastAPI, None, None]:
    """Create test FastAPI application."""
    test_app = FastAPI()
    test_app.include_router(router, prefix="/v1")

    # Mock the app.state.pool for dependency injection
    test_app.state.pool = MagicMock()

    yield test_app

    test_app.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client for the application."""
    return TestClient(app)


class TestVerifyEndpoint:
    """Tests for GET /v1/token/verify endpoint."""

    def test_valid_token(self, app: FastAPI, client: TestClient) -> None:
        mock_service = MagicMock(spec=TokenVerificationService)
        mock_service.verify.return_value = True
        app.dependency_overrides[get_verification_service] = lambda: mock_service

        response = client.get("/v1/token/verify", params={"token": TOKEN})

        assert response.status_code == 200
        assert response.json() == {"valid": True}
        mock_service.verify.assert_called_once_with(TOKEN)

    def test_unknown_token_is_not_an_error(self, app: FastAPI, client: TestClient) -> None:
        """A miss is a 200 with valid=false."""
        mock_service = MagicMock(spec=TokenVerificationService)
        mock_service.verify.return_value = False
        app.dependency_overrides[get_verification_service] = lambda: mock_service

        response = client.get("/v1/token/verify", params={"token": "whatever"})

        assert response.status_code == 200
        assert response.json() == {"valid": False}
        mock_service.verify.assert_called_once_with("whatever")

    def test_missing_token_parameter(self, client: TestClient) -> None:
        response = client.get("/v1/token/verify")
        assert response.status_code == 422

    def test_verify_is_repeatable(self, app: FastAPI, client: TestClient) -> None:
        mock_service = MagicMock(spec=TokenVerificationService)
        mock_service.verify.return_value = True
        app.dependency_overrides[get_verification_service] = lambda: mock_service

        first = client.get("/v1/token/verify", params={"token": TOKEN})
        second = client.get("/v1/token/verify", params={"token": TOKEN})

        assert first.json() == second.json() == {"valid": True}


class TestRegisterEndpoint:
    """Tests for POST /v1/register endpoint."""

    def test_register_success_returns_201(self, app: FastAPI, client: TestClient) -> None:
        mock_service = MagicMock(spec=RegistrationService)
        mock_service.register.return_value = "nimoer"
        app.dependency_overrides[get_registration_service] = lambda: mock_service

        response = client.post(
            "/v1/register",
            json={"username": "nimoer", "password": "abc123", "token": TOKEN},
        )

        assert response.status_code == 201
        assert response.json() == {"message": "Account created", "username": "nimoer"}
        mock_service.register.assert_called_once_with("nimoer", "abc123", TOKEN)

    def test_invalid_token_returns_403(self, app: FastAPI, client: TestClient) -> None:
        mock_service = MagicMock(spec=RegistrationService)
        mock_service.register.side_effect = InvalidToken(TOKEN)
        app.dependency_overrides[get_registration_service] = lambda: mock_service

        response = client.post(
            "/v1/register",
            json={"username": "nimoer", "password": "abc123", "token": TOKEN},
        )

        assert response.status_code == 403
        assert response.json() == {"detail": "Invalid invitation token"}

    def test_username_taken_returns_409(self, app: FastAPI, client: TestClient) -> None:
        mock_service = MagicMock(spec=RegistrationService)
        mock_service.register.side_effect = UsernameTaken("nimoer")
        app.dependency_overrides[get_registration_service] = lambda: mock_service

        response = client.post(
            "/v1/register",
            json={"username": "nimoer", "password": "abc123", "token": TOKEN},
        )

        assert response.status_code == 409
        assert response.json() == {"detail": "Username already taken"}

    @pytest.mark.parametrize(
        "body",
        [
            {"password": "abc123", "token": TOKEN},
            {"username": "nimoer", "token": TOKEN},
            {"username": "nimoer", "password": "abc123"},
            {"username": "", "password": "abc123", "token": TOKEN},
            {"username": "   ", "password": "abc123", "token": TOKEN},
            {"username": "n" * 151, "password": "abc123", "token": TOKEN},
            {"username": "nimoer", "password": "a" * 73, "token": TOKEN},
            {"username": "nimoer", "password": "\u00e9" * 37, "token": TOKEN},
            {"username": "nimoer", "password": "abc123", "token": "not-a-uuid"},
        ],
    )
    def test_invalid_body_returns_422(
        self, app: FastAPI, client: TestClient, body: dict
    ) -> None:
        mock_service = MagicMock(spec=RegistrationService)
        app.dependency_overrides[get_registration_service] = lambda: mock_service

        response = client.post("/v1/register", json=body)

        assert response.status_code == 422
        mock_service.register.assert_not_called()

    def test_username_stripped_before_service(self, app: FastAPI, client: TestClient) -> None:
        mock_service = MagicMock(spec=RegistrationService)
        mock_service.register.return_value = "nimoer"
        app.dependency_overrides[get_registration_service] = lambda: mock_service

        response = client.post(
            "/v1/register",
            json={"username": "  nimoer  ", "password": "abc123", "token": TOKEN},
        )

        assert response.status_code == 201
        mock_service.register.assert_called_once_with("nimoer", "abc123", TOKEN)

    def test_password_of_72_bytes_accepted(self, app: FastAPI, client: TestClient) -> None:
        mock_service = MagicMock(spec=RegistrationService)
        mock_service.register.return_value = "nimoer"
        app.dependency_overrides[get_registration_service] = lambda: mock_service

        response = client.post(
            "/v1/register",
            json={"username": "nimoer", "password": "a" * 72, "token": TOKEN},
        )

        assert response.status_code == 201

    def test_invalid_account_details_returns_422(
        self, app: FastAPI, client: TestClient
    ) -> None:
        mock_service = MagicMock(spec=RegistrationService)
        mock_service.register.side_effect = InvalidAccountDetails(
            "Password must be at most 72 bytes"
        )
        app.dependency_overrides[get_registration_service] = lambda: mock_service

        response = client.post(
            "/v1/register",
            json={"username": "nimoer", "password": "abc123", "token": TOKEN},
        )

        assert response.status_code == 422
        assert response.json() == {"detail": "Password must be at most 72 bytes"}


class TestIssueTokenEndpoint:
    """Tests for POST /v1/tokens endpoint."""

    def _override(self, app: FastAPI, admin_api_key: str) -> MagicMock:
        mock_service = MagicMock(spec=InvitationService)
        mock_service.issue.return_value = Invitation(
            token=TOKEN, link=f"http://localhost:3000/?token={TOKEN}"
        )
        app.dependency_overrides[get_invitation_service] = lambda: mock_service
        app.dependency_overrides[get_settings] = lambda: Settings(admin_api_key=admin_api_key)
        return mock_service

    def test_issue_with_admin_key(self, app: FastAPI, client: TestClient) -> None:
        mock_service = self._override(app, "s3cret")

        response = client.post("/v1/tokens", headers={"X-Admin-Key": "s3cret"})

        assert response.status_code == 201
        assert response.json() == {
            "token": TOKEN,
            "invite_url": f"http://localhost:3000/?token={TOKEN}",
        }
        mock_service.issue.assert_called_once()

    def test_wrong_admin_key_returns_403(self, app: FastAPI, client: TestClient) -> None:
        mock_service = self._override(app, "s3cret")

        response = client.post("/v1/tokens", headers={"X-Admin-Key": "guess"})

        assert response.status_code == 403
        mock_service.issue.assert_not_called()

    def test_missing_admin_key_returns_403(self, app: FastAPI, client: TestClient) -> None:
        mock_service = self._override(app, "s3cret")

        response = client.post("/v1/tokens")

        assert response.status_code == 403
        mock_service.issue.assert_not_called()

    def test_unconfigured_admin_key_disables_endpoint(
        self, app: FastAPI, client: TestClient
    ) -> None:
        mock_service = self._override(app, "")

        response = client.post("/v1/tokens", headers={"X-Admin-Key": ""})

        assert response.status_code == 403
        mock_service.issue.assert_not_called()
