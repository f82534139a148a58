# caja/modules/drafts/repository.py
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc

from caja.shared.database.models import SaleDraft

class DraftRepository:
    """Acceso a borradores de venta (sin commit)"""

    def __init__(self, db: Session):
        self.db = db

    def create_draft(
        self,
        name: str,
        items: List[Dict[str, Any]],
        total: Decimal,
        operator_id: Optional[int] = None,
        register_id: Optional[int] = None
    ) -> SaleDraft:
        draft = SaleDraft(
            name=name,
            operator_id=operator_id,
            register_id=register_id,
            items=items,
            total=total,
            created_at=datetime.now()
        )
        self.db.add(draft)
        self.db.flush()
        return draft

    def get_draft(self, draft_id: int) -> Optional[SaleDraft]:
        return self.db.query(SaleDraft).filter(SaleDraft.id == draft_id).first()

    def get_drafts(self, operator_id: Optional[int] = None) -> List[SaleDraft]:
        """Borradores, más recientes primero"""
        query = self.db.query(SaleDraft)
        if operator_id is not None:
            query = query.filter(SaleDraft.operator_id == operator_id)
        return query.order_by(desc(SaleDraft.created_at), desc(SaleDraft.id)).all()

    def delete_draft(self, draft: SaleDraft) -> None:
        self.db.delete(draft)
        self.db.flush()
