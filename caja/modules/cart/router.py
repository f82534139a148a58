# caja/modules/cart/router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from caja.config.database import get_db
from caja.core.dependencies import get_operator_id
from caja.modules.pricing.schemas import QuoteRequest, QuoteResponse
from .cart import Cart
from .service import CartRegistry, CartService, get_cart_registry
from .schemas import (
    CartItemAddRequest, CartItemUpdateRequest, CartResponse, CartLineResponse
)

router = APIRouter(prefix="/registers/{register_id}/cart", tags=["Carrito"])

def build_cart_response(register_id: int, cart: Cart) -> CartResponse:
    lines = cart.lines()
    return CartResponse(
        register_id=register_id,
        lines=[CartLineResponse.model_validate(line) for line in lines],
        items_count=sum(line.quantity for line in lines),
        total=cart.total()
    )

@router.get("", response_model=CartResponse)
def get_cart(
    register_id: int,
    operator_id: int = Depends(get_operator_id),
    registry: CartRegistry = Depends(get_cart_registry)
):
    """Carrito actual de la caja"""
    with registry.locked(register_id) as cart:
        return build_cart_response(register_id, cart)

@router.post("/items", response_model=CartResponse)
def add_item(
    register_id: int,
    item: CartItemAddRequest,
    operator_id: int = Depends(get_operator_id),
    registry: CartRegistry = Depends(get_cart_registry),
    db: Session = Depends(get_db)
):
    """
    Agregar producto al carrito.
    Si el producto ya está, se incrementa la cantidad.
    """
    service = CartService(db, registry)
    with registry.locked(register_id) as cart:
        service.add_product(register_id, item.product_id, item.quantity)
        return build_cart_response(register_id, cart)

@router.patch("/items/{line_id}", response_model=CartResponse)
def update_item(
    register_id: int,
    line_id: int,
    item: CartItemUpdateRequest,
    operator_id: int = Depends(get_operator_id),
    registry: CartRegistry = Depends(get_cart_registry)
):
    with registry.locked(register_id) as cart:
        cart.set_quantity(line_id, item.quantity)
        return build_cart_response(register_id, cart)

@router.delete("/items/{line_id}", response_model=CartResponse)
def remove_item(
    register_id: int,
    line_id: int,
    operator_id: int = Depends(get_operator_id),
    registry: CartRegistry = Depends(get_cart_registry)
):
    with registry.locked(register_id) as cart:
        cart.remove(line_id)
        return build_cart_response(register_id, cart)

@router.delete("", response_model=CartResponse)
def clear_cart(
    register_id: int,
    operator_id: int = Depends(get_operator_id),
    registry: CartRegistry = Depends(get_cart_registry)
):
    """Cancelar la venta en curso"""
    with registry.locked(register_id) as cart:
        cart.clear()
        return build_cart_response(register_id, cart)

@router.post("/quote", response_model=QuoteResponse)
def quote_cart(
    register_id: int,
    request: QuoteRequest,
    operator_id: int = Depends(get_operator_id),
    registry: CartRegistry = Depends(get_cart_registry),
    db: Session = Depends(get_db)
):
    """
    Totales a pagar según medio de pago, descuento y cupón.
    El efectivo se redondea al múltiplo de 10 más cercano.
    """
    service = CartService(db, registry)
    return service.quote(
        register_id,
        payment_method=request.payment_method,
        discount_percent=request.discount_percent,
        coupon_amount=request.coupon_amount,
        amount_received=request.amount_received
    )
