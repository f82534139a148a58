# caja/modules/sales/repository.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import desc

from caja.shared.database.models import Product, Sale, SaleItem, StockMovement, SALE_COMPLETED

FOLIO_PREFIXES = {
    "boleta": "B",
    "factura": "F",
}

class SalesRepository:
    """
    Repositorio de ventas. No hace commit: la venta, sus líneas y el
    descuento de stock se confirman juntos en el servicio.
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== VENTAS ====================

    def create_sale(
        self,
        session_id: int,
        operator_id: Optional[int],
        client_id: Optional[int],
        payment_method: str,
        document_type: str,
        subtotal: Decimal,
        discount_percent: Decimal,
        coupon_amount: Decimal,
        discount_amount: Decimal,
        rounding_adjustment: Decimal,
        total: Decimal,
        amount_received: Optional[Decimal],
        change_due: Decimal
    ) -> Sale:
        """
        Crear venta y asignar folio correlativo por tipo de documento (B-000001, F-000001)
        """
        sale = Sale(
            session_id=session_id,
            operator_id=operator_id,
            client_id=client_id,
            payment_method=payment_method,
            document_type=document_type,
            subtotal=subtotal,
            discount_percent=discount_percent,
            coupon_amount=coupon_amount,
            discount_amount=discount_amount,
            rounding_adjustment=rounding_adjustment,
            total=total,
            amount_received=amount_received,
            change_due=change_due,
            status=SALE_COMPLETED,
            created_at=datetime.now()
        )
        self.db.add(sale)
        self.db.flush()

        prefix = FOLIO_PREFIXES.get(document_type, "V")
        sale.folio = f"{prefix}-{sale.id:06d}"
        return sale

    def create_sale_item(
        self,
        sale: Sale,
        product_id: int,
        product_name: str,
        quantity: int,
        unit_price: Decimal
    ) -> SaleItem:
        sale_item = SaleItem(
            product_id=product_id,
            product_name=product_name,
            quantity=quantity,
            unit_price=unit_price,
            subtotal=unit_price * quantity
        )
        sale.items.append(sale_item)
        return sale_item

    def get_sale_by_id(self, sale_id: int) -> Optional[Sale]:
        return self.db.query(Sale).options(
            selectinload(Sale.items)
        ).filter(Sale.id == sale_id).first()

    def get_sales_by_session(self, session_id: int) -> List[Sale]:
        """
        Ventas de una sesión, más recientes primero
        """
        return self.db.query(Sale).options(
            selectinload(Sale.items)
        ).filter(
            Sale.session_id == session_id
        ).order_by(desc(Sale.id)).all()

    # ==================== STOCK ====================

    def create_stock_movement(
        self,
        product_id: int,
        quantity_sold: int,
        reference: str
    ) -> StockMovement:
        """
        Registrar salida de stock por venta (llamar después del descuento)
        """
        new_stock = self.db.query(Product.stock).filter(Product.id == product_id).scalar()
        movement = StockMovement(
            product_id=product_id,
            quantity=-quantity_sold,
            previous_stock=new_stock + quantity_sold,
            new_stock=new_stock,
            reason="venta",
            reference=reference,
            created_at=datetime.now()
        )
        self.db.add(movement)
        return movement
