from dataclasses import dataclass, replace
from datetime import datetime

import pytest

from feedback_bank.core.errors import ValidationFailed
from feedback_bank.models.orm import FeedbackModule, FeedbackQuestion
from feedback_bank.services.ordering import apply_order, insert_at_end, move_to, renumber
from feedback_bank.services.store import module_scope, question_scope

@dataclass(frozen=True)
class Item:
    id: str
    position: int
    created_at: datetime = datetime(2024, 1, 1)

def _renumber(items):
    return renumber(items, lambda item, p: replace(item, position=p))

def test_insert_at_end_does_not_mutate():
    items = [Item("a", 1)]
    out = insert_at_end(items, Item("b", 2))
    assert [i.id for i in out] == ["a", "b"]
    assert len(items) == 1

def test_move_to_and_renumber():
    items = [Item("a", 1), Item("b", 2), Item("c", 5)]
    moved = _renumber(move_to(items, "c", 0))
    assert [(i.id, i.position) for i in moved] == [("c", 1), ("a", 2), ("b", 3)]
    clamped = move_to(items, "a", 99)
    assert [i.id for i in clamped] == ["b", "c", "a"]
    with pytest.raises(KeyError):
        move_to(items, "zzz", 0)

def test_renumber_is_dense_and_keeps_unchanged_items():
    items = [Item("a", 1), Item("b", 7)]
    out = _renumber(items)
    assert [i.position for i in out] == [1, 2]
    assert out[0] is items[0]

def test_apply_order_trails_unmentioned():
    items = [Item("a", 1), Item("b", 2), Item("c", 3)]
    assert [i.id for i in apply_order(items, ["c", "ghost"])] == ["c", "a", "b"]

def test_scope_next_position_and_reorder(db):
    assert module_scope().next_position(db) == 1
    rows = [FeedbackModule(title=t, position=p) for t, p in (("A", 1), ("B", 4))]
    db.add_all(rows)
    db.commit()
    assert module_scope().next_position(db) == 5

    module_scope().reorder(db, [rows[1].id, rows[0].id])
    db.commit()
    assert [(m.title, m.position) for m in module_scope().children(db)] == [("B", 1), ("A", 2)]

def test_scope_reorder_validates_before_writing(db):
    module = FeedbackModule(title="A", position=3)
    db.add(module)
    db.commit()
    with pytest.raises(ValidationFailed):
        module_scope().reorder(db, [module.id, module.id])
    with pytest.raises(ValidationFailed):
        module_scope().reorder(db, [module.id, "missing"])
    assert module.position == 3

def test_question_scope_only_sees_its_module(db):
    a, b = FeedbackModule(title="A", position=1), FeedbackModule(title="B", position=2)
    db.add_all([a, b])
    db.flush()
    db.add_all([
        FeedbackQuestion(module_id=a.id, title="qa", position=3),
        FeedbackQuestion(module_id=b.id, title="qb", position=9),
    ])
    db.commit()
    assert question_scope(a.id).next_position(db) == 4
    assert [q.title for q in question_scope(b.id).children(db)] == ["qb"]
