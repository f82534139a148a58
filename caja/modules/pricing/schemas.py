from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from decimal import Decimal
from enum import Enum

# ==================== ENUMS ====================

class PaymentMethod(str, Enum):
    efectivo = "efectivo"
    tarjeta = "tarjeta"
    transferencia = "transferencia"
    cheque = "cheque"

# ==================== SCHEMAS ====================

class PricingBaseModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        json_encoders={Decimal: float}
    )

class QuoteRequest(BaseModel):
    payment_method: PaymentMethod = PaymentMethod.efectivo
    discount_percent: Decimal = Field(Decimal("0"), ge=0, le=100, description="Descuento porcentual")
    coupon_amount: Decimal = Field(Decimal("0"), ge=0, description="Monto fijo del cupón")
    amount_received: Optional[Decimal] = Field(None, ge=0, description="Efectivo recibido")

class QuoteResponse(PricingBaseModel):
    payment_method: PaymentMethod
    subtotal: Decimal
    discount_amount: Decimal
    rounding_adjustment: Decimal
    payable_total: Decimal
    change_due: Decimal
