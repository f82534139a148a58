from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text, ForeignKey, Numeric, JSON,
    Index, UniqueConstraint, CheckConstraint, text
)
from sqlalchemy.orm import relationship
from caja.config.database import Base

# Estados persistidos de la sesión de caja
SESSION_OPEN = "abierta"
SESSION_CLOSED = "cerrada"

# Estado de una venta registrada
SALE_COMPLETED = "completada"

# ===== CAJAS =====

class Register(Base):
    """Caja física (punto de cobro) de una sucursal"""
    __tablename__ = "registers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    # Relationships
    sessions = relationship("RegisterSession", back_populates="register")

class RegisterSession(Base):
    """Sesión de caja: apertura, movimientos, ventas y cierre"""
    __tablename__ = "register_sessions"

    id = Column(Integer, primary_key=True, index=True)
    register_id = Column(Integer, ForeignKey("registers.id"), nullable=False, index=True)
    operator_id = Column(Integer, nullable=False)
    status = Column(String(20), default=SESSION_OPEN, nullable=False)

    opened_at = Column(DateTime, default=datetime.now, nullable=False)
    opening_float = Column(Numeric(14, 2), default=0, nullable=False)
    initialized = Column(Boolean, default=False, nullable=False)

    # Cierre
    closed_at = Column(DateTime)
    closed_by = Column(Integer)
    declared_float = Column(Numeric(14, 2))
    theoretical_float = Column(Numeric(14, 2))
    variance = Column(Numeric(14, 2))
    closing_notes = Column(Text)

    # Una sola sesión abierta por caja
    __table_args__ = (
        Index(
            "uq_register_sessions_one_open",
            "register_id",
            unique=True,
            sqlite_where=text("status = 'abierta'"),
            postgresql_where=text("status = 'abierta'"),
        ),
    )

    # Relationships
    register = relationship("Register", back_populates="sessions")
    movements = relationship("CashMovement", back_populates="session", order_by="CashMovement.id")
    sales = relationship("Sale", back_populates="session", order_by="Sale.id")

    @property
    def is_open(self) -> bool:
        return self.status == SESSION_OPEN

class CashMovement(Base):
    """Ingreso o retiro manual de efectivo"""
    __tablename__ = "cash_movements"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("register_sessions.id"), nullable=False, index=True)
    movement_type = Column(String(20), nullable=False)  # ingreso | retiro
    amount = Column(Numeric(14, 2), nullable=False)
    note = Column(String(255))
    operator_id = Column(Integer)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_cash_movements_amount_positive"),
    )

    # Relationships
    session = relationship("RegisterSession", back_populates="movements")

# ===== CATÁLOGO =====

class Product(Base):
    """Producto con su stock disponible"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(64), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    unit_price = Column(Numeric(14, 2), default=0, nullable=False)
    stock = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
    )

class StockMovement(Base):
    """Historial de cambios de stock"""
    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)  # negativo en ventas
    previous_stock = Column(Integer, nullable=False)
    new_stock = Column(Integer, nullable=False)
    reason = Column(String(50), nullable=False)
    reference = Column(String(64))
    created_at = Column(DateTime, default=datetime.now, nullable=False)

class Client(Base):
    """Cliente (requerido para factura)"""
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    rut = Column(String(20), unique=True, nullable=False)
    business_name = Column(String(255), nullable=False)
    email = Column(String(255))
    is_active = Column(Boolean, default=True, nullable=False)

# ===== VENTAS =====

class Sale(Base):
    """Venta confirmada; inmutable una vez registrada"""
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("register_sessions.id"), nullable=False, index=True)
    folio = Column(String(32), unique=True)
    operator_id = Column(Integer)
    client_id = Column(Integer, ForeignKey("clients.id"))
    payment_method = Column(String(30), nullable=False)
    document_type = Column(String(30), nullable=False)

    subtotal = Column(Numeric(14, 4), nullable=False)
    discount_percent = Column(Numeric(5, 2), default=0, nullable=False)
    coupon_amount = Column(Numeric(14, 2), default=0, nullable=False)
    discount_amount = Column(Numeric(14, 4), default=0, nullable=False)
    rounding_adjustment = Column(Numeric(14, 4), default=0, nullable=False)
    total = Column(Numeric(14, 4), nullable=False)
    amount_received = Column(Numeric(14, 2))
    change_due = Column(Numeric(14, 4), default=0, nullable=False)

    status = Column(String(30), default=SALE_COMPLETED, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    # Relationships
    session = relationship("RegisterSession", back_populates="sales")
    client = relationship("Client")
    items = relationship("SaleItem", back_populates="sale", order_by="SaleItem.id")

class SaleItem(Base):
    """Línea de venta con precio congelado"""
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(14, 2), nullable=False)
    subtotal = Column(Numeric(14, 2), nullable=False)

    __table_args__ = (
        UniqueConstraint("sale_id", "product_id", name="uq_sale_items_product"),
    )

    # Relationships
    sale = relationship("Sale", back_populates="items")

# ===== BORRADORES =====

class SaleDraft(Base):
    """Borrador de venta (copia nombrada del carrito)"""
    __tablename__ = "sale_drafts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    operator_id = Column(Integer, index=True)
    register_id = Column(Integer)
    items = Column(JSON, nullable=False)
    total = Column(Numeric(14, 2), nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
