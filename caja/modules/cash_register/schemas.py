from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

# ==================== ENUMS ====================

class SessionStatus(str, Enum):
    abierta = "abierta"
    cerrada = "cerrada"

class MovementType(str, Enum):
    ingreso = "ingreso"
    retiro = "retiro"

# ==================== CLASE BASE PARA RESPUESTAS ====================

class CashRegisterBaseModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        json_encoders={
            Decimal: float,
            datetime: lambda v: v.isoformat(),
        }
    )

# ==================== REQUEST SCHEMAS ====================

class SessionOpenRequest(BaseModel):
    opening_float: Optional[Decimal] = Field(
        None, description="Monto inicial; si se omite la sesión queda sin inicializar"
    )

class OpeningFloatRequest(BaseModel):
    amount: Decimal = Field(..., description="Saldo inicial de la caja")

class CashMovementRequest(BaseModel):
    movement_type: MovementType
    amount: Decimal = Field(..., description="Monto del movimiento (mayor a 0)")
    note: Optional[str] = Field(None, max_length=255, description="Observación")

class AuditRequest(BaseModel):
    counted_amount: Decimal = Field(..., description="Efectivo contado en el arqueo")

class SessionCloseRequest(BaseModel):
    declared_float: Decimal = Field(..., description="Efectivo declarado al cierre")
    notes: Optional[str] = Field(None, description="Observaciones del cierre")

# ==================== RESPONSE SCHEMAS ====================

class RegisterSessionResponse(CashRegisterBaseModel):
    id: int
    register_id: int
    operator_id: int
    status: SessionStatus
    opened_at: datetime
    opening_float: Decimal
    initialized: bool
    closed_at: Optional[datetime] = None
    closed_by: Optional[int] = None
    declared_float: Optional[Decimal] = None
    theoretical_float: Optional[Decimal] = None
    variance: Optional[Decimal] = None
    closing_notes: Optional[str] = None

class CashMovementResponse(CashRegisterBaseModel):
    id: int
    session_id: int
    movement_type: MovementType
    amount: Decimal
    note: Optional[str]
    operator_id: Optional[int]
    created_at: datetime

class SessionSummaryResponse(CashRegisterBaseModel):
    session_id: int
    status: SessionStatus
    opening_float: Decimal
    cash_sales: Decimal
    ingresos: Decimal
    retiros: Decimal
    theoretical_float: Decimal
    sales_count: int
    sales_by_payment_method: Dict[str, Decimal]
    movements: List[CashMovementResponse]

class AuditResponse(CashRegisterBaseModel):
    session_id: int
    theoretical_float: Decimal
    counted_amount: Decimal
    variance: Decimal
    audited_at: datetime
