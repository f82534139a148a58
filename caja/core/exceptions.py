# caja/core/exceptions.py
"""
Errores de dominio de la caja.

Los servicios lanzan estas excepciones; el handler registrado en la app
las traduce a respuestas JSON con el status_code de cada tipo.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class CajaError(Exception):
    """Error base: precondición corregible por quien llama"""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "caja_error"
    default_message: str = "Operación rechazada"

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.details}


class AlreadyOpenError(CajaError):
    status_code = status.HTTP_409_CONFLICT
    code = "already_open"
    default_message = "La caja ya tiene una sesión abierta"


class SessionNotOpenError(CajaError):
    status_code = status.HTTP_409_CONFLICT
    code = "session_not_open"
    default_message = "La sesión de caja no está abierta"


class InvalidAmountError(CajaError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "invalid_amount"
    default_message = "Monto inválido"


class InsufficientStockError(CajaError):
    status_code = status.HTTP_409_CONFLICT
    code = "insufficient_stock"
    default_message = "Stock insuficiente"

    def __init__(self, lines: List[Dict[str, Any]], message: Optional[str] = None):
        self.lines = lines
        super().__init__(message, lines=lines)


class ClientRequiredError(CajaError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "client_required"
    default_message = "Debe seleccionar un cliente para factura electrónica"


class ValidationError(CajaError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"
    default_message = "Datos inválidos"


class NotFoundError(CajaError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Recurso no encontrado"


class PersistenceError(CajaError):
    """Falla de base de datos tras rollback; la operación completa puede reintentarse"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "persistence_error"
    default_message = "Error de persistencia, la operación fue revertida"


def register_exception_handlers(app: FastAPI):
    """Traducir errores de dominio a respuestas HTTP"""

    @app.exception_handler(CajaError)
    async def caja_error_handler(request: Request, exc: CajaError):
        logger.info(f"{request.method} {request.url.path} rechazado: {exc.code} - {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
