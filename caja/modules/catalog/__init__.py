# caja/modules/catalog/__init__.py
"""
Módulo Catálogo - colaborador externo de la caja

Expone sólo lo que la caja necesita: producto, stock, descuento condicional
de stock y consulta de clientes.
"""

from .repository import CatalogRepository, ClientRepository

__all__ = [
    "CatalogRepository",
    "ClientRepository"
]
