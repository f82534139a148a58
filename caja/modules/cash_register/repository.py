# caja/modules/cash_register/repository.py
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import func, desc, update

from caja.shared.database.models import (
    Register, RegisterSession, CashMovement, Sale,
    SESSION_OPEN, SESSION_CLOSED, SALE_COMPLETED
)

class CashRegisterRepository:
    """
    Acceso a datos de cajas, sesiones y movimientos.
    No hace commit: la transacción la maneja el servicio.
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== CAJAS ====================

    def get_active_register(self, register_id: int) -> Optional[Register]:
        return self.db.query(Register).filter(
            Register.id == register_id,
            Register.is_active == True
        ).first()

    # ==================== SESIONES ====================

    def get_session(self, session_id: int, for_update: bool = False) -> Optional[RegisterSession]:
        """
        Obtener sesión por ID; con for_update bloquea la fila (PostgreSQL)
        """
        query = self.db.query(RegisterSession).filter(RegisterSession.id == session_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        return query.first()

    def get_open_session(self, register_id: int) -> Optional[RegisterSession]:
        return self.db.query(RegisterSession).filter(
            RegisterSession.register_id == register_id,
            RegisterSession.status == SESSION_OPEN
        ).first()

    def create_session(
        self,
        register_id: int,
        operator_id: int,
        opening_float: Decimal,
        initialized: bool
    ) -> RegisterSession:
        """
        Insertar sesión abierta. El índice único parcial rechaza una segunda
        sesión abierta en la misma caja (IntegrityError en el flush).
        """
        session = RegisterSession(
            register_id=register_id,
            operator_id=operator_id,
            status=SESSION_OPEN,
            opened_at=datetime.now(),
            opening_float=opening_float,
            initialized=initialized
        )
        self.db.add(session)
        self.db.flush()
        return session

    def close_session(
        self,
        session_id: int,
        closed_by: int,
        declared_float: Decimal,
        theoretical_float: Decimal,
        variance: Decimal,
        notes: Optional[str]
    ) -> bool:
        """
        Cerrar sólo si sigue abierta. Retorna False si otra operación la cerró antes.
        """
        result = self.db.execute(
            update(RegisterSession)
            .where(
                RegisterSession.id == session_id,
                RegisterSession.status == SESSION_OPEN
            )
            .values(
                status=SESSION_CLOSED,
                closed_at=datetime.now(),
                closed_by=closed_by,
                declared_float=declared_float,
                theoretical_float=theoretical_float,
                variance=variance,
                closing_notes=notes
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # ==================== MOVIMIENTOS ====================

    def create_movement(
        self,
        session_id: int,
        movement_type: str,
        amount: Decimal,
        note: Optional[str],
        operator_id: Optional[int]
    ) -> CashMovement:
        movement = CashMovement(
            session_id=session_id,
            movement_type=movement_type,
            amount=amount,
            note=note,
            operator_id=operator_id,
            created_at=datetime.now()
        )
        self.db.add(movement)
        self.db.flush()
        return movement

    def get_movements(self, session_id: int) -> List[CashMovement]:
        """
        Movimientos de la sesión, más recientes primero
        """
        return self.db.query(CashMovement).filter(
            CashMovement.session_id == session_id
        ).order_by(desc(CashMovement.created_at), desc(CashMovement.id)).all()

    def get_movement_totals(self, session_id: int) -> Dict[str, Decimal]:
        """
        Total por tipo de movimiento {'ingreso': x, 'retiro': y}
        """
        rows = self.db.query(
            CashMovement.movement_type,
            func.coalesce(func.sum(CashMovement.amount), 0)
        ).filter(
            CashMovement.session_id == session_id
        ).group_by(CashMovement.movement_type).all()

        return {movement_type: Decimal(str(total)) for movement_type, total in rows}

    # ==================== VENTAS DE LA SESIÓN ====================

    def get_sales_totals_by_method(self, session_id: int) -> Dict[str, Dict]:
        """
        Cantidad y monto de ventas completadas por medio de pago
        """
        rows = self.db.query(
            Sale.payment_method,
            func.count(Sale.id),
            func.coalesce(func.sum(Sale.total), 0)
        ).filter(
            Sale.session_id == session_id,
            Sale.status == SALE_COMPLETED
        ).group_by(Sale.payment_method).all()

        return {
            method: {"count": count, "total": Decimal(str(total))}
            for method, count, total in rows
        }
