# caja/core/transaction.py
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from caja.core.exceptions import CajaError, PersistenceError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session, operation: str) -> Iterator[Session]:
    """
    Una operación = una transacción. Commit al salir; ante cualquier error
    rollback completo. Errores de base de datos se entregan como PersistenceError.
    """
    try:
        yield db
        db.commit()
    except CajaError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Error de persistencia en {operation}; cambios revertidos")
        raise PersistenceError(operation=operation) from e
