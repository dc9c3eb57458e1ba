"""
Position bookkeeping for ordered sibling collections.

Every ordered collection (modules, a module's questions, a module's or a
question's elements) follows the same rules:

* a new item is appended at ``MAX(position) + 1`` within its parent scope,
  so gaps left by deletes are tolerated;
* an explicit reorder renumbers the submitted ids to a dense ``1..N``;
* listings sort by ``(position, created_at)``, creation time breaking ties.

The pure helpers at the bottom work on any sequence of objects exposing
``id`` and ``position`` and are shared with the client-side cache.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar
import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from feedback_bank.core.errors import ValidationFailed
from feedback_bank.models.orm import utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T")

@dataclass(frozen=True)
class SiblingScope:
    """One parent's ordered children: an ORM model plus the filter selecting them."""

    model: Any
    criteria: Optional[ColumnElement] = None
    label: str = "item"

    def _where(self, stmt):
        return stmt.where(self.criteria) if self.criteria is not None else stmt

    def next_position(self, db: Session) -> int:
        # two concurrent inserts may compute the same value; creation time breaks the tie on read
        current = db.scalar(self._where(select(func.coalesce(func.max(self.model.position), 0))))
        return (current or 0) + 1

    def children(self, db: Session) -> List[Any]:
        stmt = self._where(select(self.model)).order_by(self.model.position.asc(), self.model.created_at.asc())
        return list(db.scalars(stmt).all())

    def reorder(self, db: Session, ordered_ids: Sequence[str]) -> List[Any]:
        """Assign ``position = index + 1`` to each id, in submission order.

        Ids outside the scope and duplicates are rejected before any row is
        touched. Siblings missing from ``ordered_ids`` keep their position.
        The caller commits, so the renumbering lands as one transaction.
        """
        if len(set(ordered_ids)) != len(ordered_ids):
            raise ValidationFailed("orderedIds must not contain duplicates")
        rows: Dict[str, Any] = {}
        if ordered_ids:
            stmt = self._where(select(self.model).where(self.model.id.in_(list(ordered_ids))))
            rows = {row.id: row for row in db.scalars(stmt).all()}
        unknown = [i for i in ordered_ids if i not in rows]
        if unknown:
            raise ValidationFailed(f"Unknown {self.label} ids: {', '.join(unknown)}")
        now = utcnow()
        ordered = [rows[i] for i in ordered_ids]
        for position, row in enumerate(ordered, start=1):
            row.position = position
            row.updated_at = now
        logger.debug(f"Renumbered {len(ordered)} {self.label} rows")
        return ordered

# ---------------------------------------------------------------------------
# Pure ordered-list helpers
# ---------------------------------------------------------------------------

def sort_key(item: Any):
    return (item.position, item.created_at)

def insert_at_end(items: Sequence[T], item: T) -> List[T]:
    return list(items) + [item]

def move_to(items: Sequence[T], item_id: str, index: int) -> List[T]:
    """Move the item with ``item_id`` to ``index`` (clamped), keeping the others' relative order."""
    current = list(items)
    source = next((i for i, it in enumerate(current) if it.id == item_id), None)
    if source is None:
        raise KeyError(item_id)
    moved = current.pop(source)
    index = max(0, min(index, len(current)))
    current.insert(index, moved)
    return current

def renumber(items: Sequence[T], with_position: Callable[[T, int], T]) -> List[T]:
    """Return the items with dense ``1..N`` positions in their current order.

    ``with_position`` builds a copy of an item at a new position, so the
    helper never mutates its input.
    """
    return [item if item.position == i else with_position(item, i) for i, item in enumerate(items, start=1)]

def apply_order(items: Sequence[T], ordered_ids: Sequence[str]) -> List[T]:
    """Put ``items`` in the order given by ``ordered_ids``; unmentioned ones trail in their old order."""
    by_id = {item.id: item for item in items}
    head = [by_id[i] for i in ordered_ids if i in by_id]
    mentioned = set(ordered_ids)
    tail = [item for item in items if item.id not in mentioned]
    return head + tail
