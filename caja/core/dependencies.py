# caja/core/dependencies.py
from typing import Optional

from fastapi import Header, HTTPException, status


def get_operator_id(x_operator_id: Optional[int] = Header(default=None)) -> int:
    """
    Operador autenticado. La autorización la resuelve un servicio externo
    que entrega el id del operador en el header X-Operator-Id.
    """
    if x_operator_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Operador no identificado"
        )
    return x_operator_id
