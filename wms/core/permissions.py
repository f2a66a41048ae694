"""
Role based access control.

Every role maps each application module to an access flag and the set of
actions it may perform there. The table is fixed; any role or module that is
not in it is denied.
"""
from enum import Enum
from typing import Callable, NamedTuple, Union

from fastapi import Depends


class Role(str, Enum):
    """User roles."""
    ADMIN = "ADMIN"
    STAFF = "STAFF"
    USER = "USER"


class Module(str, Enum):
    """Application modules, in navigation order."""
    DASHBOARD = "dashboard"
    INVENTORY = "inventory"
    PURCHASE = "purchase"
    OPNAME = "opname"
    TRANSACTIONS = "transactions"
    USERS = "users"
    INTELLIGENCE = "intelligence"
    SETTINGS = "settings"
    PROFILE = "profile"


class Action(str, Enum):
    """Actions that can be granted on a module."""
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ModulePermissions(NamedTuple):
    can_access: bool
    actions: frozenset[Action]


_ALL = frozenset(Action)
_RCU = frozenset({Action.READ, Action.CREATE, Action.UPDATE})
_RC = frozenset({Action.READ, Action.CREATE})
_RU = frozenset({Action.READ, Action.UPDATE})
_R = frozenset({Action.READ})

NO_ACCESS = ModulePermissions(False, frozenset())

PERMISSION_MATRIX: dict[Role, dict[Module, ModulePermissions]] = {
    Role.ADMIN: {
        Module.DASHBOARD: ModulePermissions(True, _ALL),
        Module.INVENTORY: ModulePermissions(True, _ALL),
        Module.PURCHASE: ModulePermissions(True, _ALL),
        Module.OPNAME: ModulePermissions(True, _ALL),
        Module.TRANSACTIONS: ModulePermissions(True, _ALL),
        Module.USERS: ModulePermissions(True, _ALL),
        Module.INTELLIGENCE: ModulePermissions(True, _ALL),
        Module.SETTINGS: ModulePermissions(True, _ALL),
        Module.PROFILE: ModulePermissions(True, _RU),
    },
    Role.STAFF: {
        Module.DASHBOARD: ModulePermissions(True, _RCU),
        Module.INVENTORY: ModulePermissions(True, _ALL),
        Module.PURCHASE: ModulePermissions(True, _RCU),
        Module.OPNAME: ModulePermissions(True, _RCU),
        Module.TRANSACTIONS: ModulePermissions(True, _RC),
        Module.USERS: NO_ACCESS,
        Module.INTELLIGENCE: NO_ACCESS,
        Module.SETTINGS: NO_ACCESS,
        Module.PROFILE: ModulePermissions(True, _RU),
    },
    Role.USER: {
        Module.DASHBOARD: ModulePermissions(True, _R),
        Module.INVENTORY: ModulePermissions(True, _R),
        Module.PURCHASE: NO_ACCESS,
        Module.OPNAME: NO_ACCESS,
        Module.TRANSACTIONS: ModulePermissions(True, _R),
        Module.USERS: NO_ACCESS,
        Module.INTELLIGENCE: NO_ACCESS,
        Module.SETTINGS: NO_ACCESS,
        Module.PROFILE: ModulePermissions(True, _RU),
    },
}


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def get_module_permissions(role: Union[Role, str], module: Union[Module, str]) -> ModulePermissions:
    """Return the access flag and granted actions; unknown combinations get no access."""
    role = _coerce(Role, role)
    module = _coerce(Module, module)
    if role is None or module is None:
        return NO_ACCESS
    return PERMISSION_MATRIX.get(role, {}).get(module, NO_ACCESS)


def can_access_module(role: Union[Role, str], module: Union[Module, str]) -> bool:
    return get_module_permissions(role, module).can_access


def has_permission(
    role: Union[Role, str],
    module: Union[Module, str],
    action: Union[Action, str]
) -> bool:
    perms = get_module_permissions(role, module)
    if not perms.can_access:
        return False
    action = _coerce(Action, action)
    return action is not None and action in perms.actions


def can_read(role, module) -> bool:
    return has_permission(role, module, Action.READ)


def can_create(role, module) -> bool:
    return has_permission(role, module, Action.CREATE)


def can_update(role, module) -> bool:
    return has_permission(role, module, Action.UPDATE)


def can_delete(role, module) -> bool:
    return has_permission(role, module, Action.DELETE)


def get_allowed_modules(role: Union[Role, str]) -> list[Module]:
    """Modules a role can open, in navigation order."""
    return [module for module in Module if can_access_module(role, module)]


def require_permission(module: Module, action: Action) -> Callable:
    """
    Build a FastAPI dependency that resolves the current user and checks
    the given module/action against their role.
    """
    # deferred: security imports the database layer
    from wms.core.security import get_current_user
    from wms.error_handlers import PermissionDeniedError

    def dependency(current_user=Depends(get_current_user)):
        if not has_permission(current_user.role, module, action):
            raise PermissionDeniedError(module.value, action.value)
        return current_user

    return dependency
