# caja/modules/cash_register/__init__.py
"""
Módulo Caja - sesiones de caja y movimientos de efectivo

- Apertura con monto inicial (una sesión abierta por caja)
- Asignación de saldo inicial
- Ingresos y retiros de efectivo
- Arqueo (comparación sin cerrar)
- Cierre con cálculo de efectivo teórico y diferencia

Arquitectura:
- router.py: Endpoints FastAPI
- service.py: Lógica de negocio
- ledger.py: Libro de movimientos de efectivo
- repository.py: Acceso a datos
- schemas.py: Modelos Pydantic de request/response
"""

from .router import router as cash_register_router
from .service import CashRegisterService
from .ledger import CashMovementLedger
from .repository import CashRegisterRepository
from .schemas import MovementType, SessionStatus

__all__ = [
    "cash_register_router",
    "CashRegisterService",
    "CashMovementLedger",
    "CashRegisterRepository",
    "MovementType",
    "SessionStatus"
]
