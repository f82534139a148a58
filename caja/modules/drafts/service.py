# caja/modules/drafts/service.py
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session

from caja.core.exceptions import NotFoundError, ValidationError
from caja.core.transaction import unit_of_work
from caja.modules.cart import Cart, CartLine
from caja.shared.database.models import SaleDraft
from .repository import DraftRepository

logger = logging.getLogger(__name__)

class DraftService:
    """
    Borradores de venta: copias nombradas del carrito que se pueden retomar
    más tarde. No dependen de una sesión de caja.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = DraftRepository(db)

    def save(
        self,
        name: str,
        cart: Cart,
        operator_id: Optional[int] = None,
        register_id: Optional[int] = None
    ) -> SaleDraft:
        """Guardar el carrito como borrador y dejarlo vacío"""
        name = (name or "").strip()
        if not name:
            raise ValidationError("El borrador necesita un nombre", field="name")
        if not cart:
            raise ValidationError("No se puede guardar un carrito vacío")

        items = [self._serialize_line(line) for line in cart.lines()]

        with unit_of_work(self.db, "guardado de borrador"):
            draft = self.repository.create_draft(
                name=name,
                items=items,
                total=cart.total(),
                operator_id=operator_id,
                register_id=register_id
            )

        cart.clear()
        logger.info(f"Borrador {draft.id} '{name}' guardado ({len(items)} líneas)")
        return draft

    def load(self, draft_id: int, cart: Cart) -> Cart:
        """Reemplazar el contenido del carrito con las líneas del borrador"""
        draft = self._get_draft(draft_id)
        cart.replace(self._deserialize_line(item) for item in draft.items)
        logger.info(f"Borrador {draft_id} cargado en carrito ({len(cart)} líneas)")
        return cart

    def delete(self, draft_id: int) -> None:
        with unit_of_work(self.db, "eliminación de borrador"):
            draft = self._get_draft(draft_id)
            self.repository.delete_draft(draft)

        logger.info(f"Borrador {draft_id} eliminado")

    def list_drafts(self, operator_id: Optional[int] = None) -> List[SaleDraft]:
        return self.repository.get_drafts(operator_id)

    def _get_draft(self, draft_id: int) -> SaleDraft:
        draft = self.repository.get_draft(draft_id)
        if not draft:
            raise NotFoundError(f"Borrador {draft_id} no encontrado", draft_id=draft_id)
        return draft

    @staticmethod
    def _serialize_line(line: CartLine) -> Dict[str, Any]:
        # Decimal como texto en JSON
        return {
            "product_id": line.product_id,
            "name": line.name,
            "unit_price": str(line.unit_price),
            "quantity": line.quantity
        }

    @staticmethod
    def _deserialize_line(item: Dict[str, Any]) -> CartLine:
        return CartLine(
            line_id=0,
            product_id=item["product_id"],
            name=item["name"],
            unit_price=Decimal(item["unit_price"]),
            quantity=item["quantity"]
        )
