# caja/modules/sales/__init__.py
"""
Módulo de Ventas - registro de la venta del carrito

- Validación de sesión abierta y cliente para factura
- Validación de stock de todas las líneas antes de escribir
- Venta, líneas, descuento de stock y movimientos de stock en una transacción
- Folio correlativo por tipo de documento

Arquitectura:
- router.py: Endpoints FastAPI
- service.py: Lógica de negocio
- repository.py: Acceso a datos
- schemas.py: Modelos Pydantic de request/response
"""

from .router import router as sales_router
from .service import SaleCommitService
from .repository import SalesRepository
from .schemas import DocumentType

__all__ = [
    "sales_router",
    "SaleCommitService",
    "SalesRepository",
    "DocumentType"
]
