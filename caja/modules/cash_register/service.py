# caja/modules/cash_register/service.py
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from caja.core.exceptions import (
    AlreadyOpenError, InvalidAmountError, NotFoundError, SessionNotOpenError, ValidationError
)
from caja.core.transaction import unit_of_work
from caja.modules.pricing import PaymentMethod, to_amount
from caja.shared.database.models import CashMovement, RegisterSession
from .ledger import CashMovementLedger
from .repository import CashRegisterRepository
from .schemas import MovementType

logger = logging.getLogger(__name__)

class CashRegisterService:
    """
    Ciclo de vida de la sesión de caja: apertura, saldo inicial,
    movimientos de efectivo, arqueo y cierre con cuadratura.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = CashRegisterRepository(db)
        self.ledger = CashMovementLedger(self.repository)

    # ==================== APERTURA ====================

    def open_session(
        self,
        register_id: int,
        opening_float: Any = None,
        operator_id: Optional[int] = None
    ) -> RegisterSession:
        """
        Abrir sesión en una caja. Falla si la caja ya tiene una sesión abierta.
        Sin monto inicial la sesión queda abierta pero no inicializada.
        """
        if operator_id is None:
            raise ValidationError("La apertura requiere un operador", field="operator_id")

        initialized = opening_float is not None
        amount = self._non_negative(opening_float, "monto inicial") if initialized else Decimal("0")

        with unit_of_work(self.db, "apertura de caja"):
            if not self.repository.get_active_register(register_id):
                raise NotFoundError(f"Caja {register_id} no encontrada", register_id=register_id)

            if self.repository.get_open_session(register_id):
                raise AlreadyOpenError(register_id=register_id)

            try:
                session = self.repository.create_session(
                    register_id=register_id,
                    operator_id=operator_id,
                    opening_float=amount,
                    initialized=initialized
                )
            except IntegrityError as e:
                # otra apertura ganó la carrera
                raise AlreadyOpenError(register_id=register_id) from e

        logger.info(f"Caja {register_id} abierta: sesión {session.id}, monto inicial {amount}")
        return session

    def assign_opening_float(self, session_id: int, amount: Any) -> RegisterSession:
        """
        Asignar saldo inicial a una sesión abierta sin inicializar
        """
        value = self._non_negative(amount, "saldo inicial")

        with unit_of_work(self.db, "asignación de saldo inicial"):
            session = self._get_session(session_id, for_update=True)
            if not session.is_open:
                raise SessionNotOpenError(session_id=session_id)
            if session.initialized:
                raise ValidationError("La sesión ya tiene saldo inicial asignado", session_id=session_id)

            session.opening_float = value
            session.initialized = True

        logger.info(f"Saldo inicial {value} asignado a sesión {session_id}")
        return session

    # ==================== CONSULTAS ====================

    def get_session(self, session_id: int) -> RegisterSession:
        return self._get_session(session_id)

    def get_open_session(self, register_id: int) -> Optional[RegisterSession]:
        return self.repository.get_open_session(register_id)

    def list_movements(self, session_id: int) -> List[CashMovement]:
        self._get_session(session_id)
        return self.ledger.entries(session_id)

    def summary(self, session_id: int) -> Dict[str, Any]:
        """
        Resumen de la sesión: ventas por medio de pago, movimientos y efectivo teórico
        """
        session = self._get_session(session_id)
        breakdown = self._reconcile(session)
        return {
            "session_id": session.id,
            "status": session.status,
            **breakdown,
            "movements": self.ledger.entries(session.id)
        }

    # ==================== MOVIMIENTOS ====================

    def record_movement(
        self,
        session_id: int,
        movement_type: MovementType,
        amount: Any,
        note: Optional[str] = None,
        operator_id: Optional[int] = None
    ) -> CashMovement:
        """
        Registrar ingreso o retiro de efectivo en una sesión abierta
        """
        with unit_of_work(self.db, "movimiento de caja"):
            session = self._get_session(session_id, for_update=True)
            movement = self.ledger.append(session, movement_type, amount, note, operator_id)

        return movement

    # ==================== ARQUEO Y CIERRE ====================

    def audit(self, session_id: int, counted_amount: Any) -> Dict[str, Any]:
        """
        Arqueo: compara el efectivo contado con el teórico. No modifica la sesión.
        """
        counted = self._non_negative(counted_amount, "monto contado")
        session = self._get_session(session_id)
        if not session.is_open:
            raise SessionNotOpenError(session_id=session_id)

        theoretical = self._reconcile(session)["theoretical_float"]
        return {
            "session_id": session.id,
            "theoretical_float": theoretical,
            "counted_amount": counted,
            "variance": counted - theoretical,
            "audited_at": datetime.now()
        }

    def close_session(
        self,
        session_id: int,
        declared_float: Any,
        notes: Optional[str] = None,
        operator_id: Optional[int] = None
    ) -> RegisterSession:
        """
        Cerrar sesión: efectivo teórico = monto inicial + ventas en efectivo
        + ingresos - retiros; diferencia = declarado - teórico.
        Un segundo cierre falla con SessionNotOpenError sin registrar nada.
        """
        declared = self._non_negative(declared_float, "monto declarado")

        with unit_of_work(self.db, "cierre de caja"):
            session = self._get_session(session_id, for_update=True)
            if not session.is_open:
                raise SessionNotOpenError(session_id=session_id)

            theoretical = self._reconcile(session)["theoretical_float"]
            variance = declared - theoretical

            closed = self.repository.close_session(
                session_id=session.id,
                closed_by=operator_id if operator_id is not None else session.operator_id,
                declared_float=declared,
                theoretical_float=theoretical,
                variance=variance,
                notes=notes
            )
            if not closed:
                raise SessionNotOpenError(session_id=session_id)

        self.db.refresh(session)
        logger.info(
            f"Caja {session.register_id} cerrada: sesión {session.id}, "
            f"teórico {theoretical}, declarado {declared}, diferencia {variance}"
        )
        return session

    # ==================== UTILIDADES ====================

    def _get_session(self, session_id: int, for_update: bool = False) -> RegisterSession:
        session = self.repository.get_session(session_id, for_update=for_update)
        if not session:
            raise NotFoundError(f"Sesión {session_id} no encontrada", session_id=session_id)
        return session

    def _reconcile(self, session: RegisterSession) -> Dict[str, Any]:
        sales = self.repository.get_sales_totals_by_method(session.id)
        movements = self.ledger.totals(session.id)

        opening = Decimal(str(session.opening_float or 0))
        cash_sales = sales.get(PaymentMethod.efectivo.value, {}).get("total", Decimal("0"))
        ingresos = movements[MovementType.ingreso]
        retiros = movements[MovementType.retiro]

        return {
            "opening_float": opening,
            "cash_sales": cash_sales,
            "ingresos": ingresos,
            "retiros": retiros,
            "theoretical_float": opening + cash_sales + ingresos - retiros,
            "sales_count": sum(entry["count"] for entry in sales.values()),
            "sales_by_payment_method": {method: entry["total"] for method, entry in sales.items()}
        }

    @staticmethod
    def _non_negative(value: Any, field: str) -> Decimal:
        amount = to_amount(value, field)
        if amount < 0:
            raise InvalidAmountError(f"El {field} no puede ser negativo", field=field)
        return amount
