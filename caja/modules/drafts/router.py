# caja/modules/drafts/router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from caja.config.database import get_db
from caja.core.dependencies import get_operator_id
from caja.modules.cart import CartRegistry, get_cart_registry
from caja.modules.cart.router import build_cart_response
from caja.modules.cart.schemas import CartResponse
from .service import DraftService
from .schemas import DraftSaveRequest, DraftLoadRequest, SaleDraftResponse

router = APIRouter(prefix="/drafts", tags=["Borradores"])

@router.post("", response_model=SaleDraftResponse)
def save_draft(
    request: DraftSaveRequest,
    operator_id: int = Depends(get_operator_id),
    registry: CartRegistry = Depends(get_cart_registry),
    db: Session = Depends(get_db)
):
    """
    Guardar el carrito de la caja como borrador.
    El carrito queda vacío.
    """
    service = DraftService(db)
    with registry.locked(request.register_id) as cart:
        return service.save(
            request.name,
            cart,
            operator_id=operator_id,
            register_id=request.register_id
        )

@router.get("", response_model=List[SaleDraftResponse])
def list_drafts(
    mine: bool = Query(False, description="Sólo borradores del operador"),
    operator_id: int = Depends(get_operator_id),
    db: Session = Depends(get_db)
):
    service = DraftService(db)
    return service.list_drafts(operator_id if mine else None)

@router.post("/{draft_id}/load", response_model=CartResponse)
def load_draft(
    draft_id: int,
    request: DraftLoadRequest,
    operator_id: int = Depends(get_operator_id),
    registry: CartRegistry = Depends(get_cart_registry),
    db: Session = Depends(get_db)
):
    """Reemplazar el carrito de la caja con el borrador"""
    service = DraftService(db)
    with registry.locked(request.register_id) as cart:
        service.load(draft_id, cart)
        return build_cart_response(request.register_id, cart)

@router.delete("/{draft_id}")
def delete_draft(
    draft_id: int,
    operator_id: int = Depends(get_operator_id),
    db: Session = Depends(get_db)
):
    service = DraftService(db)
    service.delete(draft_id)
    return {"success": True, "message": f"Borrador {draft_id} eliminado"}
