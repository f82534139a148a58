# caja/modules/cart/__init__.py
"""
Módulo Carrito - líneas de la próxima venta

Arquitectura:
- cart.py: Carrito en memoria (agregar, cantidad, quitar, limpiar, total)
- service.py: Registro de carritos por caja y vista previa de totales
- router.py: Endpoints FastAPI
- schemas.py: Modelos Pydantic de request/response
"""

from .cart import Cart, CartLine
from .router import router as cart_router
from .service import CartRegistry, CartService, cart_registry, get_cart_registry

__all__ = [
    "Cart",
    "CartLine",
    "cart_router",
    "CartRegistry",
    "CartService",
    "cart_registry",
    "get_cart_registry"
]
