"""
Authentication and account API endpoints.
Provides registration, JWT login/refresh, logout and self-service account management.
"""

from fastapi import APIRouter, Depends, status

from marketplace.config import settings
from marketplace.models.user import User
from marketplace.services.auth import AuthService
from marketplace.services.identity import IdentityContext
from marketplace.services.storage import LocalBlobStore
from marketplace.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RefreshTokenRequest,
    AccessTokenResponse
)
from marketplace.schemas.user import (
    UserResponse,
    ProfileUpdate,
    PasswordChangeRequest,
    AccountSummary
)
from marketplace.schemas.error import get_auth_error_responses, get_error_responses
from marketplace.utils.dependencies import (
    get_auth_service,
    get_blob_store,
    get_current_user,
    get_identity
)


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register account",
    description="Create a Client or Agent account",
    responses=get_error_responses(409, 422)
)
async def register(
    register_data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    user = await auth_service.register(
        email=register_data.email,
        password=register_data.password,
        first_name=register_data.first_name,
        last_name=register_data.last_name,
        role=register_data.role
    )
    return UserResponse.model_validate(user.to_dict())


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate user with email and password, returns JWT tokens",
    responses=get_error_responses(401, 403)
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    """
    Authenticate user and return JWT tokens.

    Raises:
        InvalidCredentialsError: If credentials are invalid
        InactiveUserError: If user account is inactive
    """
    user, access_token, refresh_token = await auth_service.login(
        email=login_data.email,
        password=login_data.password
    )

    return LoginResponse(
        user=UserResponse.model_validate(user.to_dict()),
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60
    )


@router.post(
    "/refresh",
    response_model=AccessTokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Refresh access token",
    description="Generate new access token using refresh token",
    responses=get_error_responses(401, 403)
)
async def refresh_token(
    refresh_data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AccessTokenResponse:
    access_token = await auth_service.refresh_access_token(
        refresh_token=refresh_data.refresh_token
    )

    return AccessTokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60
    )


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="User logout",
    description="Sign out everywhere; every token issued so far stops working",
    responses=get_auth_error_responses()
)
async def logout(
    identity: IdentityContext = Depends(get_identity),
    auth_service: AuthService = Depends(get_auth_service)
) -> None:
    await auth_service.logout(identity)


@router.get(
    "/me",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    responses=get_auth_error_responses()
)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
) -> UserResponse:
    return UserResponse.model_validate(current_user.to_dict())


@router.get(
    "/account",
    response_model=AccountSummary,
    summary="Account summary",
    description="The caller's account with owned properties and filed requests",
    responses=get_auth_error_responses()
)
async def get_account(
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> AccountSummary:
    return AccountSummary.model_validate(await auth_service.get_account_summary(current_user))


@router.patch(
    "/profile",
    response_model=UserResponse,
    summary="Update profile",
    responses=get_error_responses(401, 422)
)
async def update_profile(
    profile_data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    user = await auth_service.update_profile(
        current_user.id,
        first_name=profile_data.first_name,
        last_name=profile_data.last_name
    )
    return UserResponse.model_validate(user.to_dict())


@router.post(
    "/password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Change password",
    responses=get_error_responses(401, 422)
)
async def change_password(
    password_data: PasswordChangeRequest,
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> None:
    await auth_service.change_password(
        current_user,
        password_data.current_password,
        password_data.new_password
    )


@router.delete(
    "/account",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete own account",
    description="Delete the caller with their properties, requests, messages and images, then sign out",
    responses=get_auth_error_responses()
)
async def delete_account(
    identity: IdentityContext = Depends(get_identity),
    auth_service: AuthService = Depends(get_auth_service),
    blob_store: LocalBlobStore = Depends(get_blob_store)
) -> None:
    await auth_service.delete_account(identity, blob_store)
