# caja/modules/cash_register/ledger.py
"""
Libro de movimientos manuales de efectivo (ingresos y retiros).

Sólo agrega registros: los movimientos no se editan ni se eliminan.
"""
import logging
from decimal import Decimal
from typing import Dict, List, Optional

from caja.core.exceptions import InvalidAmountError, SessionNotOpenError
from caja.modules.pricing import to_amount
from caja.shared.database.models import CashMovement, RegisterSession
from .repository import CashRegisterRepository
from .schemas import MovementType

logger = logging.getLogger(__name__)


class CashMovementLedger:

    def __init__(self, repository: CashRegisterRepository):
        self.repository = repository

    def append(
        self,
        session: RegisterSession,
        movement_type: MovementType,
        amount,
        note: Optional[str] = None,
        operator_id: Optional[int] = None
    ) -> CashMovement:
        if not session.is_open:
            raise SessionNotOpenError(session_id=session.id)

        value = to_amount(amount, "monto del movimiento")
        if value <= 0:
            raise InvalidAmountError("El monto del movimiento debe ser mayor a 0", field="amount")

        movement_type = MovementType(movement_type)
        movement = self.repository.create_movement(
            session_id=session.id,
            movement_type=movement_type.value,
            amount=value,
            note=(note or "").strip() or None,
            operator_id=operator_id
        )
        logger.info(f"Movimiento {movement_type.value} de {value} en sesión {session.id}")
        return movement

    def entries(self, session_id: int) -> List[CashMovement]:
        return self.repository.get_movements(session_id)

    def totals(self, session_id: int) -> Dict[MovementType, Decimal]:
        raw = self.repository.get_movement_totals(session_id)
        return {
            movement_type: raw.get(movement_type.value, Decimal("0"))
            for movement_type in MovementType
        }

    def net(self, session_id: int) -> Decimal:
        """Ingresos menos retiros"""
        totals = self.totals(session_id)
        return totals[MovementType.ingreso] - totals[MovementType.retiro]
