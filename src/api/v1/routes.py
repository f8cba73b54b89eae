"""
API v1 routes.

Defines REST endpoints for the invitation-gated registration API.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.dependencies import (
    get_invitation_service,
    get_registration_service,
    get_verification_service,
    require_admin_key,
)
from src.api.models import (
    ErrorResponse,
    IssueTokenResponse,
    RegisterRequest,
    RegisterResponse,
    VerifyTokenResponse,
)
from src.domain.exceptions import InvalidAccountDetails, InvalidToken, UsernameTaken
from src.domain.registration import (
    InvitationService,
    RegistrationService,
    TokenVerificationService,
)

router = APIRouter(tags=["v1"])


@router.get(
    "/token/verify",
    response_model=VerifyTokenResponse,
    responses={422: {"description": "Validation error"}},
    summary="Verify an invitation token",
    description="Report whether the given invitation token exists. "
    "Read-only and safe to retry.",
)
async def verify_token(
    token: str = Query(..., description="Invitation token to check"),
    service: TokenVerificationService = Depends(get_verification_service),
) -> VerifyTokenResponse:
    """
    Check an invitation token.

    - **token**: token string as entered by the user

    An unknown token is not an error: it returns `valid: false`.
    """
    return VerifyTokenResponse(valid=service.verify(token))


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"model": ErrorResponse, "description": "Invalid invitation token"},
        409: {"model": ErrorResponse, "description": "Username already taken"},
        422: {"description": "Validation error or unstorable account details"},
    },
    summary="Create an account",
    description="Submit username, password and invitation token. "
    "The token is consumed and cannot be used again.",
)
async def register(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse:
    """
    Create an account from a valid invitation token.

    - **username**: desired username
    - **password**: account password
    - **token**: invitation token (UUID)
    """
    try:
        username = service.register(
            request_data.username, request_data.password, request_data.token
        )
    except InvalidToken:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid invitation token",
        ) from None
    except UsernameTaken:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already taken",
        ) from None
    except InvalidAccountDetails as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from None
    return RegisterResponse(message="Account created", username=username)


@router.post(
    "/tokens",
    response_model=IssueTokenResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin_key)],
    responses={403: {"model": ErrorResponse, "description": "Missing or wrong admin key"}},
    summary="Issue an invitation token",
    description="Generate a new invitation token and deliver its link. "
    "Requires the X-Admin-Key header.",
)
async def issue_token(
    service: InvitationService = Depends(get_invitation_service),
) -> IssueTokenResponse:
    invitation = service.issue()
    return IssueTokenResponse(token=invitation.token, invite_url=invitation.link)
