# caja/modules/pricing/calculator.py
"""
Cálculo de totales de venta.

Los pagos en efectivo se redondean al múltiplo de 10 más cercano (mitad
hacia arriba); el resto de los medios de pago no se redondea.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from caja.core.exceptions import InvalidAmountError
from .schemas import PaymentMethod

CASH_ROUNDING_STEP = Decimal("10")
HUNDRED = Decimal("100")
ZERO = Decimal("0")


@dataclass(frozen=True)
class PriceQuote:
    subtotal: Decimal
    discount_amount: Decimal
    rounding_adjustment: Decimal
    payable_total: Decimal


def to_amount(value: Any, field: str = "monto") -> Decimal:
    """Convertir a Decimal finito o lanzar InvalidAmountError"""
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(f"{field} debe ser numérico", field=field)
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(f"{field} debe ser numérico", field=field)
    if not amount.is_finite():
        raise InvalidAmountError(f"{field} debe ser un número finito", field=field)
    return amount


def round_cash(amount: Decimal, step: Decimal = CASH_ROUNDING_STEP) -> Decimal:
    """Redondear al múltiplo de `step` más cercano, empates hacia arriba"""
    return (amount / step).quantize(Decimal("1"), rounding=ROUND_HALF_UP) * step


def compute(
    cart_total: Any,
    discount_percent: Any = ZERO,
    coupon_amount: Any = ZERO,
    payment_method: PaymentMethod = PaymentMethod.efectivo,
    rounding_step: Optional[Decimal] = None
) -> PriceQuote:
    subtotal = to_amount(cart_total, "total del carrito")
    percent = to_amount(discount_percent, "descuento")
    coupon = to_amount(coupon_amount, "cupón")

    if subtotal < ZERO:
        raise InvalidAmountError("El total del carrito no puede ser negativo")
    if percent < ZERO or percent > HUNDRED:
        raise InvalidAmountError("El descuento debe estar entre 0 y 100", field="discount_percent")
    if coupon < ZERO:
        raise InvalidAmountError("El cupón no puede ser negativo", field="coupon_amount")

    discount = subtotal * percent / HUNDRED + coupon
    # nunca bajo cero
    discount = min(discount, subtotal)
    payable = subtotal - discount

    rounding = ZERO
    if PaymentMethod(payment_method) == PaymentMethod.efectivo:
        rounded = round_cash(payable, rounding_step or CASH_ROUNDING_STEP)
        rounding = rounded - payable
        payable = rounded

    return PriceQuote(
        subtotal=subtotal,
        discount_amount=discount,
        rounding_adjustment=rounding,
        payable_total=payable
    )


def change_due(amount_received: Any, payable_total: Any, payment_method: PaymentMethod) -> Decimal:
    """Vuelto: sólo aplica a efectivo"""
    if PaymentMethod(payment_method) != PaymentMethod.efectivo:
        return ZERO
    received = to_amount(amount_received, "monto recibido")
    return max(ZERO, received - to_amount(payable_total, "total"))
