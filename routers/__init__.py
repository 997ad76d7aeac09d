# routers/__init__.py
from .auth import router as auth_router
from .properties import router as properties_router
from .rentals import router as rentals_router
from .payments import router as payments_router, receipts_router
from .dashboard import router as dashboard_router

__all__ = [
     "auth_router",
     "properties_router",
     "rentals_router",
     "payments_router",
     "receipts_router",
     "dashboard_router",
]
