# caja/api/v1/router.py
from fastapi import APIRouter

from caja.config.settings import settings
from caja.modules.cash_register import cash_register_router
from caja.modules.cart import cart_router
from caja.modules.sales import sales_router
from caja.modules.drafts import drafts_router

# Router principal de la API v1
api_router = APIRouter()

# ==================== MÓDULOS ====================

api_router.include_router(cash_register_router)
api_router.include_router(cart_router)
api_router.include_router(sales_router)
api_router.include_router(drafts_router)

# ==================== ENDPOINTS RAÍZ ====================

@api_router.get("/")
def api_root():
    """Root endpoint de la API"""
    return {
        "message": f"{settings.app_name} v1",
        "version": settings.version,
        "status": "active",
        "available_endpoints": {
            "cash_register": "/api/v1/registers/{register_id}/sessions, /api/v1/sessions",
            "cart": "/api/v1/registers/{register_id}/cart",
            "sales": "/api/v1/sales",
            "drafts": "/api/v1/drafts"
        }
    }

@api_router.get("/health")
def health_check():
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.version,
        "currency": settings.currency
    }
