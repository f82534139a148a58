# caja/modules/pricing/__init__.py
"""
Módulo de Precios - descuentos, cupones y redondeo de efectivo
"""

from .calculator import PriceQuote, compute, change_due, round_cash, to_amount
from .schemas import PaymentMethod

__all__ = [
    "PriceQuote",
    "PaymentMethod",
    "compute",
    "change_due",
    "round_cash",
    "to_amount"
]
