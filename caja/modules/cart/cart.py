# caja/modules/cart/cart.py
"""
Carrito de la próxima venta.

El precio unitario se congela al agregar el producto: cambios posteriores
del catálogo no afectan las líneas ya cargadas.
"""
from dataclasses import dataclass, replace as dc_replace
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from caja.core.exceptions import NotFoundError, ValidationError


@dataclass(frozen=True)
class CartLine:
    line_id: int
    product_id: int
    name: str
    unit_price: Decimal
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart:
    """Colección ordenada de líneas; una línea por producto"""

    def __init__(self, lines: Optional[Iterable[CartLine]] = None):
        self._lines: List[CartLine] = []
        self._next_line_id = 1
        if lines:
            self.replace(lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __bool__(self) -> bool:
        return bool(self._lines)

    def lines(self) -> List[CartLine]:
        """Copia de las líneas (snapshot)"""
        return list(self._lines)

    def total(self) -> Decimal:
        return sum((line.subtotal for line in self._lines), Decimal("0"))

    def add(self, product: Any, qty: int = 1) -> CartLine:
        """Agregar producto; si ya está en el carrito se suma la cantidad"""
        qty = _validate_quantity(qty)
        if qty < 1:
            raise ValidationError("La cantidad a agregar debe ser al menos 1", field="quantity")

        for index, line in enumerate(self._lines):
            if line.product_id == product.id:
                updated = dc_replace(line, quantity=line.quantity + qty)
                self._lines[index] = updated
                return updated

        line = CartLine(
            line_id=self._next_line_id,
            product_id=product.id,
            name=product.name,
            unit_price=Decimal(str(product.unit_price)),
            quantity=qty
        )
        self._next_line_id += 1
        self._lines.append(line)
        return line

    def set_quantity(self, line_id: int, qty: int) -> Optional[CartLine]:
        """Fijar cantidad; qty <= 0 elimina la línea y retorna None"""
        qty = _validate_quantity(qty)
        index = self._index_of(line_id)
        if qty <= 0:
            del self._lines[index]
            return None
        updated = dc_replace(self._lines[index], quantity=qty)
        self._lines[index] = updated
        return updated

    def remove(self, line_id: int) -> None:
        del self._lines[self._index_of(line_id)]

    def clear(self) -> None:
        self._lines = []
        self._next_line_id = 1

    def replace(self, lines: Iterable[CartLine]) -> None:
        """Reemplazar el contenido completo (carga de borrador)"""
        self.clear()
        for line in lines:
            if line.quantity < 1:
                continue
            self._lines.append(dc_replace(line, line_id=self._next_line_id))
            self._next_line_id += 1

    def _index_of(self, line_id: int) -> int:
        for index, line in enumerate(self._lines):
            if line.line_id == line_id:
                return index
        raise NotFoundError(f"Línea {line_id} no está en el carrito", line_id=line_id)


def _validate_quantity(qty: Any) -> int:
    if isinstance(qty, bool) or not isinstance(qty, int):
        raise ValidationError("La cantidad debe ser un número entero", field="quantity")
    return qty
