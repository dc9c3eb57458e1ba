import random
from datetime import datetime, timedelta

import pytest

from feedback_bank.client import tree as t
from feedback_bank.client.search import filter_modules, shuffled_elements, shuffled_modules
from feedback_bank.models.schemas import ElementOut, ModuleOut, QuestionOut

T0 = datetime(2024, 5, 1, 12, 0, 0)

def at(n):
    return T0 + timedelta(seconds=n)

def element(id, position, content="text", module_id=None, question_id=None, n=0):
    return ElementOut(id=id, module_id=module_id, question_id=question_id, content=content,
                      position=position, created_at=at(n), updated_at=at(n))

def question(id, module_id, position, title="Q", elements=(), description=None, n=0):
    return QuestionOut(id=id, module_id=module_id, title=title, description=description, position=position,
                       created_at=at(n), updated_at=at(n), elements=list(elements))

def module(id, position, title="M", questions=(), elements=(), description=None, n=0):
    return ModuleOut(id=id, title=title, description=description, position=position, created_at=at(n),
                     updated_at=at(n), questions=list(questions), elements=list(elements))

@pytest.fixture
def tree():
    return t.load([
        module("m2", 2, "Recursion", questions=[
            question("q2", "m2", 2, "Base case", elements=[element("e3", 1, "Missing base case", question_id="q2")]),
            question("q1", "m2", 1, "Naming", elements=[
                element("e2", 2, "Use snake_case", question_id="q1", n=2),
                element("e1", 1, "Name things clearly", question_id="q1", n=1),
            ]),
        ]),
        module("m1", 1, "Loops", elements=[element("e9", 1, "Off by one", module_id="m1")]),
    ])

def test_load_sorts_every_level(tree):
    assert tree.module_ids() == ["m1", "m2"]
    m2 = tree.module("m2")
    assert [q.id for q in m2.questions] == ["q1", "q2"]
    assert [e.id for e in m2.questions[0].elements] == ["e1", "e2"]

def test_load_breaks_ties_by_creation_time():
    loaded = t.load([module("late", 1, n=5), module("early", 1, n=1)])
    assert loaded.module_ids() == ["early", "late"]

def test_lookups(tree):
    assert tree.question("q2").title == "Base case"
    assert tree.element("e9").module_id == "m1"
    assert tree.element("e3").question_id == "q2"
    assert tree.element("nope") is None

def test_reduce_does_not_mutate(tree):
    before = tree.module_ids()
    after = t.reduce(tree, t.ModulesReordered(["m2", "m1"]))
    assert tree.module_ids() == before
    assert after.module_ids() == ["m2", "m1"]
    assert [m.position for m in after.modules] == [1, 2]

def test_tree_loaded_replaces(tree):
    replaced = t.reduce(tree, t.TreeLoaded([module("m9", 1)]))
    assert replaced.module_ids() == ["m9"]

def test_module_added_and_removed(tree):
    added = t.reduce(tree, t.ModuleAdded(module("m3", 3, "Classes")))
    assert added.module_ids() == ["m1", "m2", "m3"]
    assert t.reduce(added, t.ModuleRemoved("m2")).module_ids() == ["m1", "m3"]

def test_module_changed_keeps_local_children(tree):
    local = t.reduce(tree, t.QuestionsReordered("m2", ["q2", "q1"]))
    server = module("m2", 2, "Recursion!", questions=[])
    changed = t.reduce(local, t.ModuleChanged(server))
    m2 = changed.module("m2")
    assert m2.title == "Recursion!"
    assert [q.id for q in m2.questions] == ["q2", "q1"]

def test_renames(tree):
    renamed = t.reduce(tree, t.ModuleRenamed("m1", "For loops"))
    renamed = t.reduce(renamed, t.QuestionRenamed("q1", "Identifiers"))
    assert renamed.module("m1").title == "For loops"
    assert renamed.question("q1").title == "Identifiers"

def test_question_events(tree):
    added = t.reduce(tree, t.QuestionAdded(question("q3", "m1", 1, "Termination")))
    assert [q.id for q in added.module("m1").questions] == ["q3"]
    removed = t.reduce(added, t.QuestionRemoved("q1"))
    assert removed.question("q1") is None
    assert removed.element("e1") is None
    changed = t.reduce(tree, t.QuestionChanged(question("q2", "m2", 1, "Base", n=-1)))
    assert [(q.title, q.position) for q in changed.module("m2").questions] == [("Naming", 1), ("Base", 2)]
    assert changed.question("q2").elements[0].id == "e3"

def test_server_rows_keep_local_order(tree):
    local = t.reduce(tree, t.ModulesReordered(["m2", "m1"]))
    local = t.reduce(local, t.ElementsReordered(["e2", "e1"], question_id="q1"))
    local = t.reduce(local, t.ModuleChanged(module("m1", 1, "For loops")))
    local = t.reduce(local, t.ElementChanged(element("e2", 2, "Use snake_case!", question_id="q1", n=2)))
    assert [(m.title, m.position) for m in local.modules] == [("Recursion", 1), ("For loops", 2)]
    assert [(e.content, e.position) for e in local.question("q1").elements] == [
        ("Use snake_case!", 1), ("Name things clearly", 2)
    ]

def test_element_events(tree):
    added = t.reduce(tree, t.ElementAdded(element("e4", 3, "Nice", question_id="q1")))
    assert [e.id for e in added.question("q1").elements] == ["e1", "e2", "e4"]
    added = t.reduce(added, t.ElementAdded(element("e5", 2, "Loop", module_id="m1")))
    assert [e.id for e in added.module("m1").elements] == ["e9", "e5"]

    edited = t.reduce(added, t.ElementChanged(element("e9", 1, "Off by one error", module_id="m1")))
    assert edited.element("e9").content == "Off by one error"
    removed = t.reduce(edited, t.ElementRemoved("e1"))
    assert [e.id for e in removed.question("q1").elements] == ["e2", "e4"]

def test_element_reorders(tree):
    out = t.reduce(tree, t.ElementsReordered(["e2", "e1"], question_id="q1"))
    assert [(e.id, e.position) for e in out.question("q1").elements] == [("e2", 1), ("e1", 2)]
    out = t.reduce(tree, t.ElementsReordered(["e9"], module_id="m1"))
    assert [e.position for e in out.module("m1").elements] == [1]

def test_unknown_event():
    with pytest.raises(TypeError):
        t.reduce(t.FeedbackTree(), object())

# ----- search -----

def test_empty_search_returns_everything(tree):
    assert [m.id for m in filter_modules(tree.modules, "  ")] == ["m1", "m2"]

def test_search_is_case_insensitive_across_levels(tree):
    assert [m.id for m in filter_modules(tree.modules, "LOOPS")] == ["m1"]
    hits = filter_modules(tree.modules, "snake")
    assert [m.id for m in hits] == ["m2"]
    assert [q.id for q in hits[0].questions] == ["q1"]
    assert [e.id for e in hits[0].questions[0].elements] == ["e2"]

def test_question_title_match_keeps_its_elements(tree):
    hits = filter_modules(tree.modules, "naming")
    assert [e.id for e in hits[0].questions[0].elements] == ["e1", "e2"]

def test_module_match_keeps_all_children(tree):
    hits = filter_modules(tree.modules, "recursion")
    assert len(hits[0].questions) == 2

def test_search_does_not_touch_positions(tree):
    filter_modules(tree.modules, "base")
    assert [q.position for q in tree.module("m2").questions] == [1, 2]

def test_no_match(tree):
    assert filter_modules(tree.modules, "quantum") == []

# ----- shuffle -----

def test_shuffled_modules_is_a_display_permutation():
    many = t.load([module(f"m{i}", i, n=i) for i in range(1, 9)])
    out = shuffled_modules(many.modules, random.Random(7))
    expected = list(many.modules)
    random.Random(7).shuffle(expected)
    assert [m.id for m in out] == [m.id for m in expected]
    assert sorted(m.id for m in out) == sorted(many.module_ids())
    assert many.module_ids() == [f"m{i}" for i in range(1, 9)]
    assert {m.id: m.position for m in out} == {f"m{i}": i for i in range(1, 9)}

def test_shuffled_elements_only_touches_one_module():
    elements = [element(f"e{i}", i, module_id="m1", n=i) for i in range(1, 7)]
    loaded = t.load([module("m1", 1, elements=elements), module("m2", 2, elements=[element("x", 1, module_id="m2")])])
    out = shuffled_elements(loaded.modules, "m1", random.Random(3))
    assert [m.id for m in out] == ["m1", "m2"]
    assert sorted(e.id for e in out[0].elements) == [f"e{i}" for i in range(1, 7)]
    assert out[1] is loaded.modules[1]
    assert [e.id for e in loaded.module("m1").elements] == [f"e{i}" for i in range(1, 7)]
    assert all(e.position == int(e.id[1:]) for e in out[0].elements)
