from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

# ==================== CLASE BASE ====================

class DraftBaseModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        json_encoders={
            Decimal: float,
            datetime: lambda v: v.isoformat(),
        }
    )

# ==================== REQUEST SCHEMAS ====================

class DraftSaveRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120, description="Nombre del borrador")
    register_id: int = Field(..., description="Caja cuyo carrito se guarda")

class DraftLoadRequest(BaseModel):
    register_id: int = Field(..., description="Caja cuyo carrito se reemplaza")

# ==================== RESPONSE SCHEMAS ====================

class DraftItemResponse(BaseModel):
    product_id: int
    name: str
    unit_price: Decimal
    quantity: int

class SaleDraftResponse(DraftBaseModel):
    id: int
    name: str
    operator_id: Optional[int]
    register_id: Optional[int]
    items: List[DraftItemResponse]
    total: Decimal
    created_at: datetime
