# caja/modules/catalog/repository.py
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import update

from caja.shared.database.models import Product, Client

class CatalogRepository:
    """
    Acceso al catálogo: consulta de productos y stock, descuento condicional de stock
    """

    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> Optional[Product]:
        """
        Obtener producto activo por ID
        """
        return self.db.query(Product).filter(
            Product.id == product_id,
            Product.is_active == True
        ).first()

    def get_stock(self, product_id: int) -> int:
        """
        Stock actual del producto (0 si no existe o está inactivo)
        """
        stock = self.db.query(Product.stock).filter(
            Product.id == product_id,
            Product.is_active == True
        ).scalar()
        return stock or 0

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """
        Descontar stock sólo si alcanza (UPDATE ... WHERE stock >= qty).
        Retorna False si ninguna fila fue actualizada.
        """
        result = self.db.execute(
            update(Product)
            .where(
                Product.id == product_id,
                Product.is_active == True,
                Product.stock >= quantity
            )
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

class ClientRepository:
    """
    Registro de clientes (sólo lectura desde la caja)
    """

    def __init__(self, db: Session):
        self.db = db

    def get_client(self, client_id: int) -> Optional[Client]:
        return self.db.query(Client).filter(
            Client.id == client_id,
            Client.is_active == True
        ).first()
