from pydantic import BaseModel, ConfigDict, Field
from typing import List
from decimal import Decimal

# ==================== CLASE BASE ====================

class CartBaseModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        json_encoders={Decimal: float}
    )

# ==================== REQUEST SCHEMAS ====================

class CartItemAddRequest(BaseModel):
    product_id: int = Field(..., description="ID del producto")
    quantity: int = Field(1, ge=1, description="Cantidad a agregar")

class CartItemUpdateRequest(BaseModel):
    quantity: int = Field(..., description="Nueva cantidad; 0 o menos elimina la línea")

# ==================== RESPONSE SCHEMAS ====================

class CartLineResponse(CartBaseModel):
    line_id: int
    product_id: int
    name: str
    unit_price: Decimal
    quantity: int
    subtotal: Decimal

class CartResponse(CartBaseModel):
    register_id: int
    lines: List[CartLineResponse]
    items_count: int
    total: Decimal
