from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

from caja.modules.pricing.schemas import PaymentMethod

# ==================== ENUMS ====================

class DocumentType(str, Enum):
    boleta = "boleta"
    factura = "factura"

# ==================== CLASE BASE PARA RESPUESTAS (Pydantic v2) ====================

class SalesBaseModel(BaseModel):
    """
    Clase base para todos los esquemas de respuesta,
    con configuración de Pydantic v2.
    """
    model_config = ConfigDict(
        from_attributes=True,
        json_encoders={
            Decimal: float,
            datetime: lambda v: v.isoformat(),
        }
    )

# ==================== REQUEST SCHEMAS ====================

class SaleCommitRequest(BaseModel):
    session_id: int = Field(..., description="Sesión de caja abierta")
    payment_method: PaymentMethod = Field(..., description="Medio de pago")
    document_type: DocumentType = Field(DocumentType.boleta, description="Tipo de documento")
    client_id: Optional[int] = Field(None, description="Cliente (obligatorio para factura)")
    discount_percent: Decimal = Field(Decimal("0"), ge=0, le=100, description="Descuento porcentual")
    coupon_amount: Decimal = Field(Decimal("0"), ge=0, description="Monto del cupón")
    amount_received: Optional[Decimal] = Field(None, ge=0, description="Efectivo recibido")

    @model_validator(mode="after")
    def validate_received_only_for_cash(self):
        if self.amount_received is not None and self.payment_method != PaymentMethod.efectivo:
            raise ValueError("El monto recibido sólo aplica a pagos en efectivo")
        return self

# ==================== RESPONSE SCHEMAS ====================

class SaleItemResponse(SalesBaseModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

class SaleResponse(SalesBaseModel):
    id: int
    folio: str
    session_id: int
    operator_id: Optional[int]
    client_id: Optional[int]
    payment_method: PaymentMethod
    document_type: DocumentType
    subtotal: Decimal
    discount_percent: Decimal
    coupon_amount: Decimal
    discount_amount: Decimal
    rounding_adjustment: Decimal
    total: Decimal
    amount_received: Optional[Decimal]
    change_due: Decimal
    status: str
    created_at: datetime

    # Relacionados
    items: List[SaleItemResponse]
