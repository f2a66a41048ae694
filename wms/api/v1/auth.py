"""
Authentication API endpoints: login, token refresh and the current user's
own profile and password.
"""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, status

from wms.core.permissions import Action, Module, get_allowed_modules, get_module_permissions, require_permission
from wms.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from wms.gateway import PersistenceGateway, get_gateway
from wms.logging_config import get_logger
from wms.models.user import User
from wms.schemas.user import (
    UserResponse,
    LoginRequest,
    LoginResponse,
    TokenRefresh,
    Token,
    ProfileUpdate,
    UserChangePassword,
    ModuleAccess,
)

logger = get_logger("auth")

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """
    Authenticate user and return JWT tokens.

    - **email**: User's email address
    - **password**: User's password
    """
    user = gateway.get_user_by_email(credentials.email)

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.warning(f"Failed login for {credentials.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    with gateway.atomic():
        gateway.update(user, {"last_active": datetime.now(timezone.utc)})

    logger.info(f"User {user.id} logged in")
    return LoginResponse(
        access_token=create_access_token(subject=user.id, additional_claims={"role": user.role}),
        refresh_token=create_refresh_token(subject=user.id),
        token_type="bearer",
        user=UserResponse.model_validate(user)
    )


@router.post("/refresh", response_model=Token)
def refresh_token(
    token_data: TokenRefresh,
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Exchange a refresh token for a new token pair."""
    user_id = decode_token(token_data.refresh_token, expected_type="refresh")

    user = gateway.get_user(user_id)
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token"
        )

    return Token(
        access_token=create_access_token(subject=user.id, additional_claims={"role": user.role}),
        refresh_token=create_refresh_token(subject=user.id),
        token_type="bearer"
    )


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    current_user: User = Depends(require_permission(Module.PROFILE, Action.READ))
):
    """Get current authenticated user's profile information."""
    return current_user


@router.get("/me/modules", response_model=list[ModuleAccess])
def get_my_modules(
    current_user: User = Depends(require_permission(Module.PROFILE, Action.READ))
):
    """Modules the current user can open, in navigation order, with granted actions."""
    return [
        ModuleAccess(
            module=module,
            actions=sorted(get_module_permissions(current_user.role, module).actions, key=list(Action).index)
        )
        for module in get_allowed_modules(current_user.role)
    ]


@router.put("/me", response_model=UserResponse)
def update_profile(
    profile: ProfileUpdate,
    current_user: User = Depends(require_permission(Module.PROFILE, Action.UPDATE)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """
    Update current user's profile information.

    - **name**: Display name
    - **avatar**: Avatar URL
    """
    values = profile.model_dump(exclude_unset=True)
    if values.get("name") is None:
        values.pop("name", None)

    with gateway.atomic():
        gateway.update(current_user, values)

    return current_user


@router.post("/me/change-password", status_code=status.HTTP_200_OK)
def change_password(
    password_data: UserChangePassword,
    current_user: User = Depends(require_permission(Module.PROFILE, Action.UPDATE)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """
    Change current user's password.

    - **current_password**: Current password for verification
    - **new_password**: New password (minimum 6 characters)
    - **confirm_password**: Must repeat the new password
    """
    if not verify_password(password_data.current_password, current_user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Incorrect current password"
        )

    with gateway.atomic():
        gateway.update(current_user, {"password_hash": get_password_hash(password_data.new_password)})

    logger.info(f"User {current_user.id} changed their password")
    return {"message": "Password updated successfully"}
