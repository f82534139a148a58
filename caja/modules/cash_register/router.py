# caja/modules/cash_register/router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from caja.config.database import get_db
from caja.core.dependencies import get_operator_id
from .service import CashRegisterService
from .schemas import (
    SessionOpenRequest, OpeningFloatRequest, CashMovementRequest,
    AuditRequest, SessionCloseRequest,
    RegisterSessionResponse, CashMovementResponse,
    SessionSummaryResponse, AuditResponse
)

router = APIRouter(tags=["Caja"])

# ==================== APERTURA ====================

@router.post("/registers/{register_id}/sessions", response_model=RegisterSessionResponse)
def open_session(
    register_id: int,
    request: SessionOpenRequest,
    operator_id: int = Depends(get_operator_id),
    db: Session = Depends(get_db)
):
    """
    Abrir caja

    - Una sola sesión abierta por caja (409 si ya existe)
    - El monto inicial no puede ser negativo
    """
    service = CashRegisterService(db)
    return service.open_session(
        register_id=register_id,
        opening_float=request.opening_float,
        operator_id=operator_id
    )

@router.get("/registers/{register_id}/sessions/open", response_model=Optional[RegisterSessionResponse])
def get_open_session(
    register_id: int,
    operator_id: int = Depends(get_operator_id),
    db: Session = Depends(get_db)
):
    """Sesión abierta de la caja, o null si está cerrada"""
    service = CashRegisterService(db)
    return service.get_open_session(register_id)

@router.get("/sessions/{session_id}", response_model=RegisterSessionResponse)
def get_session(
    session_id: int,
    operator_id: int = Depends(get_operator_id),
    db: Session = Depends(get_db)
):
    service = CashRegisterService(db)
    return service.get_session(session_id)

@router.post("/sessions/{session_id}/opening-float", response_model=RegisterSessionResponse)
def assign_opening_float(
    session_id: int,
    request: OpeningFloatRequest,
    operator_id: int = Depends(get_operator_id),
    db: Session = Depends(get_db)
):
    """Asignar saldo inicial a una sesión abierta sin inicializar"""
    service = CashRegisterService(db)
    return service.assign_opening_float(session_id, request.amount)

# ==================== MOVIMIENTOS ====================

@router.post("/sessions/{session_id}/movements", response_model=CashMovementResponse)
def record_movement(
    session_id: int,
    request: CashMovementRequest,
    operator_id: int = Depends(get_operator_id),
    db: Session = Depends(get_db)
):
    """Registrar ingreso o retiro de efectivo"""
    service = CashRegisterService(db)
    return service.record_movement(
        session_id=session_id,
        movement_type=request.movement_type,
        amount=request.amount,
        note=request.note,
        operator_id=operator_id
    )

@router.get("/sessions/{session_id}/movements", response_model=List[CashMovementResponse])
def list_movements(
    session_id: int,
    operator_id: int = Depends(get_operator_id),
    db: Session = Depends(get_db)
):
    service = CashRegisterService(db)
    return service.list_movements(session_id)

# ==================== ARQUEO Y CIERRE ====================

@router.get("/sessions/{session_id}/summary", response_model=SessionSummaryResponse)
def get_summary(
    session_id: int,
    operator_id: int = Depends(get_operator_id),
    db: Session = Depends(get_db)
):
    """
    Resumen de caja: ventas por medio de pago, ingresos, retiros y efectivo teórico
    """
    service = CashRegisterService(db)
    return service.summary(session_id)

@router.post("/sessions/{session_id}/audit", response_model=AuditResponse)
def audit_session(
    session_id: int,
    request: AuditRequest,
    operator_id: int = Depends(get_operator_id),
    db: Session = Depends(get_db)
):
    """Arqueo de caja (sólo lectura)"""
    service = CashRegisterService(db)
    return service.audit(session_id, request.counted_amount)

@router.post("/sessions/{session_id}/close", response_model=RegisterSessionResponse)
def close_session(
    session_id: int,
    request: SessionCloseRequest,
    operator_id: int = Depends(get_operator_id),
    db: Session = Depends(get_db)
):
    """
    Cerrar caja

    Calcula el efectivo teórico y la diferencia con lo declarado.
    Cerrar dos veces la misma sesión responde 409.
    """
    service = CashRegisterService(db)
    return service.close_session(
        session_id=session_id,
        declared_float=request.declared_float,
        notes=request.notes,
        operator_id=operator_id
    )
