# caja/modules/sales/router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List

from caja.config.database import get_db
from caja.core.dependencies import get_operator_id
from caja.modules.cart import CartRegistry, get_cart_registry
from caja.modules.cash_register import CashRegisterService
from .service import SaleCommitService
from .schemas import SaleCommitRequest, SaleResponse

router = APIRouter(prefix="/sales", tags=["Ventas"])

# ==================== REGISTRO DE VENTA ====================

@router.post("", response_model=SaleResponse)
def commit_sale(
    request: SaleCommitRequest,
    operator_id: int = Depends(get_operator_id),
    registry: CartRegistry = Depends(get_cart_registry),
    db: Session = Depends(get_db)
):
    """
    Registrar la venta del carrito de la caja de la sesión.

    **Validaciones (todo o nada):**
    - Sesión abierta (409)
    - Factura requiere cliente (422)
    - Stock suficiente en todas las líneas (409, con el detalle de cada faltante)
    - Efectivo recibido mayor o igual al total (422)

    Si la venta se registra el carrito queda vacío.
    """
    register_id = CashRegisterService(db).get_session(request.session_id).register_id
    # el carrito se toma sin transacción abierta; commit vuelve a leer la sesión
    db.rollback()
    service = SaleCommitService(db)

    with registry.locked(register_id) as cart:
        return service.commit(
            cart,
            session_id=request.session_id,
            payment_method=request.payment_method,
            document_type=request.document_type,
            client_id=request.client_id,
            discount_percent=request.discount_percent,
            coupon_amount=request.coupon_amount,
            amount_received=request.amount_received,
            operator_id=operator_id
        )

# ==================== CONSULTAS ====================

@router.get("", response_model=List[SaleResponse])
def list_sales(
    session_id: int = Query(..., description="Sesión de caja"),
    operator_id: int = Depends(get_operator_id),
    db: Session = Depends(get_db)
):
    """Ventas de una sesión, más recientes primero"""
    service = SaleCommitService(db)
    return service.list_sales(session_id)

@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(
    sale_id: int,
    operator_id: int = Depends(get_operator_id),
    db: Session = Depends(get_db)
):
    service = SaleCommitService(db)
    return service.get_sale(sale_id)
