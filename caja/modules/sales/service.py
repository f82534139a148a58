# caja/modules/sales/service.py
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session

from caja.config.settings import settings
from caja.core.exceptions import (
    ClientRequiredError, InsufficientStockError, InvalidAmountError,
    NotFoundError, SessionNotOpenError, ValidationError
)
from caja.core.transaction import unit_of_work
from caja.modules.cart import Cart, CartLine
from caja.modules.cash_register.repository import CashRegisterRepository
from caja.modules.catalog import CatalogRepository, ClientRepository
from caja.modules.pricing import PaymentMethod, PriceQuote, change_due, compute, to_amount
from caja.shared.database.models import Sale
from .repository import SalesRepository
from .schemas import DocumentType

logger = logging.getLogger(__name__)

class SaleCommitService:
    """
    Registro de ventas: validación de stock, totales, persistencia de la venta
    con sus líneas y descuento de stock en una sola transacción.
    """

    def __init__(
        self,
        db: Session,
        catalog: Optional[CatalogRepository] = None,
        clients: Optional[ClientRepository] = None
    ):
        self.db = db
        self.repository = SalesRepository(db)
        self.sessions = CashRegisterRepository(db)
        self.catalog = catalog or CatalogRepository(db)
        self.clients = clients or ClientRepository(db)

    # ==================== REGISTRO DE VENTA ====================

    def commit(
        self,
        cart: Cart,
        session_id: int,
        payment_method: PaymentMethod,
        document_type: DocumentType = DocumentType.boleta,
        client_id: Optional[int] = None,
        discount_percent: Any = 0,
        coupon_amount: Any = 0,
        amount_received: Any = None,
        operator_id: Optional[int] = None
    ) -> Sale:
        """
        Confirmar la venta del carrito.

        Orden de validación: sesión abierta, cliente para factura, carrito
        no vacío, stock de todas las líneas. Todo o nada: si algo falla no
        queda venta ni descuento de stock, y el carrito no se modifica.
        """
        payment_method = PaymentMethod(payment_method)
        document_type = DocumentType(document_type)
        lines = cart.lines()

        with unit_of_work(self.db, "registro de venta"):
            session = self.sessions.get_session(session_id, for_update=True)
            if not session:
                raise NotFoundError(f"Sesión {session_id} no encontrada", session_id=session_id)
            if not session.is_open:
                raise SessionNotOpenError(session_id=session_id)

            if document_type == DocumentType.factura and client_id is None:
                raise ClientRequiredError()
            if not lines:
                raise ValidationError("El carrito está vacío")
            if client_id is not None and not self.clients.get_client(client_id):
                raise NotFoundError(f"Cliente {client_id} no encontrado", client_id=client_id)

            shortages = self._validate_stock(lines)
            if shortages:
                logger.warning(f"Venta rechazada en sesión {session_id}: stock insuficiente {shortages}")
                raise InsufficientStockError(shortages)

            quote = compute(
                cart.total(),
                discount_percent,
                coupon_amount,
                payment_method,
                rounding_step=settings.cash_rounding_step
            )
            received = self._amount_received(quote, payment_method, amount_received)

            sale = self.repository.create_sale(
                session_id=session.id,
                operator_id=operator_id,
                client_id=client_id,
                payment_method=payment_method.value,
                document_type=document_type.value,
                subtotal=quote.subtotal,
                discount_percent=to_amount(discount_percent, "descuento"),
                coupon_amount=to_amount(coupon_amount, "cupón"),
                discount_amount=quote.discount_amount,
                rounding_adjustment=quote.rounding_adjustment,
                total=quote.payable_total,
                amount_received=received,
                change_due=change_due(received, quote.payable_total, payment_method)
                if received is not None else Decimal("0")
            )

            for line in lines:
                self.repository.create_sale_item(
                    sale,
                    product_id=line.product_id,
                    product_name=line.name,
                    quantity=line.quantity,
                    unit_price=line.unit_price
                )
                if not self.catalog.decrement_stock(line.product_id, line.quantity):
                    # otra venta descontó el stock después de la validación
                    raise InsufficientStockError([self._shortage(line)])
                self.repository.create_stock_movement(line.product_id, line.quantity, sale.folio)

        cart.clear()
        logger.info(
            f"Venta {sale.folio} registrada en sesión {session_id}: "
            f"{payment_method.value} {quote.payable_total} ({len(lines)} líneas)"
        )
        return sale

    # ==================== CONSULTAS ====================

    def get_sale(self, sale_id: int) -> Sale:
        sale = self.repository.get_sale_by_id(sale_id)
        if not sale:
            raise NotFoundError(f"Venta {sale_id} no encontrada", sale_id=sale_id)
        return sale

    def list_sales(self, session_id: int) -> List[Sale]:
        if not self.sessions.get_session(session_id):
            raise NotFoundError(f"Sesión {session_id} no encontrada", session_id=session_id)
        return self.repository.get_sales_by_session(session_id)

    # ==================== UTILIDADES ====================

    def _validate_stock(self, lines: List[CartLine]) -> List[Dict[str, Any]]:
        """
        Validar stock de todas las líneas; retorna las que no alcanzan
        """
        return [
            self._shortage(line)
            for line in lines
            if line.quantity > self.catalog.get_stock(line.product_id)
        ]

    def _shortage(self, line: CartLine) -> Dict[str, Any]:
        return {
            "product_id": line.product_id,
            "name": line.name,
            "requested": line.quantity,
            "available": self.catalog.get_stock(line.product_id)
        }

    @staticmethod
    def _amount_received(
        quote: PriceQuote,
        payment_method: PaymentMethod,
        amount_received: Any
    ) -> Optional[Decimal]:
        """
        Efectivo: sin monto recibido se asume pago exacto; menor al total se rechaza
        """
        if payment_method != PaymentMethod.efectivo:
            return None
        if amount_received is None:
            return quote.payable_total

        received = to_amount(amount_received, "monto recibido")
        if received < quote.payable_total:
            raise InvalidAmountError(
                "El monto recibido debe ser mayor o igual al total",
                payable_total=float(quote.payable_total),
                amount_received=float(received)
            )
        return received
