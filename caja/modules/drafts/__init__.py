# caja/modules/drafts/__init__.py
"""
Módulo Borradores - ventas guardadas para retomar

Arquitectura:
- router.py: Endpoints FastAPI
- service.py: Guardar, cargar, listar y eliminar borradores
- repository.py: Acceso a datos
- schemas.py: Modelos Pydantic de request/response
"""

from .router import router as drafts_router
from .service import DraftService
from .repository import DraftRepository

__all__ = [
    "drafts_router",
    "DraftService",
    "DraftRepository"
]
