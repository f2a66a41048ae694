"""API v1 Router."""
from fastapi import APIRouter

from wms.api.v1 import auth, users, inventory, transactions, purchases, opname, dashboard

api_router = APIRouter(prefix="/api/v1")

# Include all route modules
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(inventory.router)
api_router.include_router(transactions.router)
api_router.include_router(purchases.router)
api_router.include_router(opname.router)
api_router.include_router(dashboard.router)

__all__ = ["api_router"]
