# caja/modules/cart/service.py
import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional
from sqlalchemy.orm import Session

from caja.config.settings import settings
from caja.core.exceptions import NotFoundError
from caja.modules.catalog import CatalogRepository
from caja.modules.pricing import PaymentMethod, PriceQuote, compute, change_due
from .cart import Cart, CartLine

logger = logging.getLogger(__name__)

class CartRegistry:
    """
    Un carrito por caja, cada uno con su propio lock (las peticiones HTTP
    corren en threads distintos).

    Orden de bloqueo: primero el carrito, después la base de datos. Nunca
    tomar el carrito con una transacción abierta.
    """

    def __init__(self):
        self._carts: Dict[int, Cart] = {}
        self._locks = {}
        self._guard = threading.Lock()

    def _lock_for(self, register_id: int):
        with self._guard:
            lock = self._locks.get(register_id)
            if lock is None:
                lock = self._locks[register_id] = threading.RLock()
            return lock

    @contextmanager
    def locked(self, register_id: int) -> Iterator[Cart]:
        with self._lock_for(register_id):
            with self._guard:
                cart = self._carts.get(register_id)
                if cart is None:
                    cart = self._carts[register_id] = Cart()
            yield cart

    def reset(self):
        with self._guard:
            self._carts.clear()
            self._locks.clear()

cart_registry = CartRegistry()

def get_cart_registry() -> CartRegistry:
    """Dependency FastAPI"""
    return cart_registry

class CartService:
    """
    Operaciones de carrito que necesitan el catálogo (precio al momento de agregar)
    """

    def __init__(self, db: Session, registry: CartRegistry, catalog: Optional[CatalogRepository] = None):
        self.db = db
        self.registry = registry
        self.catalog = catalog or CatalogRepository(db)

    def add_product(self, register_id: int, product_id: int, quantity: int = 1) -> CartLine:
        with self.registry.locked(register_id) as cart:
            product = self.catalog.get_product(product_id)
            if not product:
                raise NotFoundError(f"Producto {product_id} no encontrado", product_id=product_id)
            return cart.add(product, quantity)

    def quote(
        self,
        register_id: int,
        payment_method: PaymentMethod,
        discount_percent=0,
        coupon_amount=0,
        amount_received=None
    ) -> Dict:
        """Vista previa de totales del carrito (no persiste nada)"""
        with self.registry.locked(register_id) as cart:
            cart_total = cart.total()

        quote: PriceQuote = compute(
            cart_total,
            discount_percent,
            coupon_amount,
            payment_method,
            rounding_step=settings.cash_rounding_step
        )
        received = quote.payable_total if amount_received is None else amount_received
        return {
            "payment_method": payment_method,
            "subtotal": quote.subtotal,
            "discount_amount": quote.discount_amount,
            "rounding_adjustment": quote.rounding_adjustment,
            "payable_total": quote.payable_total,
            "change_due": change_due(received, quote.payable_total, payment_method)
        }
