"""
User administration endpoints.
"""
from fastapi import APIRouter, Depends, status

from wms.core.permissions import Action, Module, require_permission
from wms.core.security import get_password_hash
from wms.error_handlers import DuplicateResourceError, InvalidStateError, ResourceNotFoundError
from wms.gateway import PersistenceGateway, get_gateway
from wms.logging_config import get_logger
from wms.models.user import User
from wms.schemas.user import UserCreate, UserResponse, UserUpdate

logger = get_logger("users")

router = APIRouter(prefix="/users", tags=["Users"])


def _get_user_or_404(gateway: PersistenceGateway, user_id: int) -> User:
    user = gateway.get_user(user_id)
    if user is None:
        raise ResourceNotFoundError("User", user_id)
    return user


@router.get("", response_model=list[UserResponse])
def list_users(
    current_user: User = Depends(require_permission(Module.USERS, Action.READ)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """List all user accounts."""
    return gateway.list_users()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    current_user: User = Depends(require_permission(Module.USERS, Action.CREATE)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """
    Create a user account.

    - **email**: Must not be registered yet
    - **password**: Minimum 6 characters
    - **role**: ADMIN, STAFF or USER
    """
    with gateway.atomic():
        if gateway.get_user_by_email(user_data.email):
            raise DuplicateResourceError("User", "email", user_data.email)

        user = gateway.insert_user(
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            name=user_data.name,
            role=user_data.role.value,
            status=user_data.status.value,
        )

    logger.info(f"User {user.id} ({user.role}) created by {current_user.id}")
    return user


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    current_user: User = Depends(require_permission(Module.USERS, Action.READ)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return _get_user_or_404(gateway, user_id)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    user_update: UserUpdate,
    current_user: User = Depends(require_permission(Module.USERS, Action.UPDATE)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Change a user's name, email, role or status."""
    values = {
        field: value.value if hasattr(value, "value") else value
        for field, value in user_update.model_dump(exclude_unset=True).items()
        if value is not None
    }

    with gateway.atomic():
        user = _get_user_or_404(gateway, user_id)

        email = values.get("email")
        if email:
            email = values["email"] = email.strip().lower()
        if email and email != user.email.lower():
            existing = gateway.get_user_by_email(email)
            if existing and existing.id != user.id:
                raise DuplicateResourceError("User", "email", email)

        gateway.update(user, values)

    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    current_user: User = Depends(require_permission(Module.USERS, Action.DELETE)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Delete a user account. Administrators cannot delete themselves."""
    with gateway.atomic():
        user = _get_user_or_404(gateway, user_id)
        if user.id == current_user.id:
            raise InvalidStateError("User", user_id, "in use", message="You cannot delete your own account")
        gateway.delete(user)

    logger.info(f"User {user_id} deleted by {current_user.id}")
