"""Configuration, database access, authentication and role permissions."""
from wms.core.config import settings, get_settings
from wms.core.database import Base, get_db, get_db_context
from wms.core.permissions import Action, Module, Role, has_permission, require_permission
from wms.core.security import get_current_user

__all__ = [
    "settings",
    "get_settings",
    "Base",
    "get_db",
    "get_db_context",
    "Action",
    "Module",
    "Role",
    "has_permission",
    "require_permission",
    "get_current_user",
]
