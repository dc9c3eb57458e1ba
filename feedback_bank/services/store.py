from typing import Any, Dict, Optional, Type, TypeVar
import logging

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from feedback_bank.core.errors import NotFoundError
from feedback_bank.models.orm import FeedbackElement, FeedbackModule, FeedbackQuestion
from feedback_bank.services.ordering import SiblingScope

logger = logging.getLogger(__name__)

M = TypeVar("M")

def module_scope() -> SiblingScope:
    return SiblingScope(FeedbackModule, None, "module")

def question_scope(module_id: str) -> SiblingScope:
    return SiblingScope(FeedbackQuestion, FeedbackQuestion.module_id == module_id, "question")

def element_scope(module_id: Optional[str] = None, question_id: Optional[str] = None) -> SiblingScope:
    if question_id is not None:
        return SiblingScope(FeedbackElement, FeedbackElement.question_id == question_id, "element")
    return SiblingScope(FeedbackElement, FeedbackElement.module_id == module_id, "element")

def get_or_404(db: Session, model: Type[M], entity: str, id: str, **criteria: Any) -> M:
    """Fetch one row by id, optionally constrained to a parent; raise NotFoundError otherwise."""
    stmt = select(model).where(model.id == id)
    for column, value in criteria.items():
        stmt = stmt.where(getattr(model, column) == value)
    row = db.scalar(stmt)
    if row is None:
        raise NotFoundError(entity)
    return row

def create_child(db: Session, scope: SiblingScope, row: M) -> M:
    """Append ``row`` at the end of its sibling scope and persist it."""
    row.position = scope.next_position(db)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info(f"Created {scope.label} {row.id} at position {row.position}")
    return row

def supplied_fields(payload: BaseModel) -> Dict[str, Any]:
    """Fields the caller actually sent; a null position means "leave it"."""
    fields = payload.model_dump(exclude_unset=True)
    if fields.get("position") is None:
        fields.pop("position", None)
    return fields

def update_row(db: Session, row: M, fields: Dict[str, Any]) -> M:
    """Apply the supplied fields; ``updated_at`` is refreshed even when nothing changed."""
    for key, value in fields.items():
        setattr(row, key, value)
    row.touch()
    db.commit()
    db.refresh(row)
    return row

def delete_row(db: Session, row: Any) -> None:
    """Delete a row; descendants go with it through the cascade rules."""
    label = repr(row)
    db.delete(row)
    db.commit()
    logger.info(f"Deleted {label}")
