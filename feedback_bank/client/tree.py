"""
Client-side cache of the module -> question -> element tree.

The tree is immutable. Every change goes through ``reduce(tree, event)``,
which returns a new tree and never touches the network. Loading a fresh
listing replaces the whole tree rather than merging into it.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from feedback_bank.models.schemas import ElementOut, ModuleOut, QuestionOut
from feedback_bank.services.ordering import apply_order, insert_at_end, renumber, sort_key

# ============= Events =============

@dataclass(frozen=True)
class TreeLoaded:
    modules: Sequence[ModuleOut]

@dataclass(frozen=True)
class ModuleAdded:
    module: ModuleOut

@dataclass(frozen=True)
class ModuleChanged:
    module: ModuleOut

@dataclass(frozen=True)
class ModuleRenamed:
    module_id: str
    title: str

@dataclass(frozen=True)
class ModuleRemoved:
    module_id: str

@dataclass(frozen=True)
class QuestionAdded:
    question: QuestionOut

@dataclass(frozen=True)
class QuestionChanged:
    question: QuestionOut

@dataclass(frozen=True)
class QuestionRenamed:
    question_id: str
    title: str

@dataclass(frozen=True)
class QuestionRemoved:
    question_id: str

@dataclass(frozen=True)
class ElementAdded:
    element: ElementOut

@dataclass(frozen=True)
class ElementChanged:
    element: ElementOut

@dataclass(frozen=True)
class ElementRemoved:
    element_id: str

@dataclass(frozen=True)
class ModulesReordered:
    ordered_ids: Sequence[str]

@dataclass(frozen=True)
class QuestionsReordered:
    module_id: str
    ordered_ids: Sequence[str]

@dataclass(frozen=True)
class ElementsReordered:
    ordered_ids: Sequence[str]
    module_id: Optional[str] = None
    question_id: Optional[str] = None

Event = Union[
    TreeLoaded, ModuleAdded, ModuleChanged, ModuleRenamed, ModuleRemoved,
    QuestionAdded, QuestionChanged, QuestionRenamed, QuestionRemoved,
    ElementAdded, ElementChanged, ElementRemoved,
    ModulesReordered, QuestionsReordered, ElementsReordered,
]

# ============= Tree =============

@dataclass(frozen=True)
class FeedbackTree:
    modules: Tuple[ModuleOut, ...] = field(default_factory=tuple)

    def module(self, module_id: str) -> Optional[ModuleOut]:
        return next((m for m in self.modules if m.id == module_id), None)

    def question(self, question_id: str) -> Optional[QuestionOut]:
        for m in self.modules:
            for q in m.questions:
                if q.id == question_id:
                    return q
        return None

    def element(self, element_id: str) -> Optional[ElementOut]:
        for m in self.modules:
            for e in m.elements:
                if e.id == element_id:
                    return e
            for q in m.questions:
                for e in q.elements:
                    if e.id == element_id:
                        return e
        return None

    def module_ids(self) -> List[str]:
        return [m.id for m in self.modules]

def _position(item, position: int):
    return item.model_copy(update={"position": position})

def _sorted(items):
    return sorted(items, key=sort_key)

def normalize_question(question: QuestionOut) -> QuestionOut:
    return question.model_copy(update={"elements": _sorted(question.elements)})

def normalize_module(module: ModuleOut) -> ModuleOut:
    return module.model_copy(update={
        "questions": [normalize_question(q) for q in _sorted(module.questions)],
        "elements": _sorted(module.elements),
    })

def load(modules: Sequence[ModuleOut]) -> FeedbackTree:
    """Build a tree in display order: position first, creation time breaking ties."""
    return FeedbackTree(tuple(normalize_module(m) for m in _sorted(modules)))

def _reordered(items, ordered_ids):
    return renumber(apply_order(items, ordered_ids), _position)

# ----- structural helpers -----

def _map_modules(tree: FeedbackTree, fn: Callable[[ModuleOut], ModuleOut]) -> FeedbackTree:
    return FeedbackTree(tuple(fn(m) for m in tree.modules))

def _map_questions(tree: FeedbackTree, fn: Callable[[QuestionOut], QuestionOut]) -> FeedbackTree:
    return _map_modules(tree, lambda m: m.model_copy(update={"questions": [fn(q) for q in m.questions]}))

# ============= Reducers =============

def _tree_loaded(tree: FeedbackTree, event: TreeLoaded) -> FeedbackTree:
    return load(event.modules)

def _module_added(tree: FeedbackTree, event: ModuleAdded) -> FeedbackTree:
    return FeedbackTree(tuple(insert_at_end(tree.modules, normalize_module(event.module))))

def _module_changed(tree: FeedbackTree, event: ModuleChanged) -> FeedbackTree:
    # local position and children win: a pending reorder may not have reached the server yet
    def swap(m: ModuleOut) -> ModuleOut:
        if m.id != event.module.id:
            return m
        return event.module.model_copy(
            update={"position": m.position, "questions": m.questions, "elements": m.elements}
        )
    return _map_modules(tree, swap)

def _module_renamed(tree: FeedbackTree, event: ModuleRenamed) -> FeedbackTree:
    return _map_modules(
        tree, lambda m: m.model_copy(update={"title": event.title}) if m.id == event.module_id else m
    )

def _module_removed(tree: FeedbackTree, event: ModuleRemoved) -> FeedbackTree:
    return FeedbackTree(tuple(m for m in tree.modules if m.id != event.module_id))

def _question_added(tree: FeedbackTree, event: QuestionAdded) -> FeedbackTree:
    q = normalize_question(event.question)
    return _map_modules(
        tree,
        lambda m: m.model_copy(update={"questions": insert_at_end(m.questions, q)}) if m.id == q.module_id else m,
    )

def _question_changed(tree: FeedbackTree, event: QuestionChanged) -> FeedbackTree:
    changed = event.question

    def swap(m: ModuleOut) -> ModuleOut:
        if m.id != changed.module_id:
            return m
        questions = [
            changed.model_copy(update={"position": q.position, "elements": q.elements}) if q.id == changed.id else q
            for q in m.questions
        ]
        return m.model_copy(update={"questions": questions})
    return _map_modules(tree, swap)

def _question_renamed(tree: FeedbackTree, event: QuestionRenamed) -> FeedbackTree:
    return _map_questions(
        tree, lambda q: q.model_copy(update={"title": event.title}) if q.id == event.question_id else q
    )

def _question_removed(tree: FeedbackTree, event: QuestionRemoved) -> FeedbackTree:
    return _map_modules(
        tree, lambda m: m.model_copy(update={"questions": [q for q in m.questions if q.id != event.question_id]})
    )

def _element_added(tree: FeedbackTree, event: ElementAdded) -> FeedbackTree:
    e = event.element
    if e.question_id is not None:
        return _map_questions(
            tree,
            lambda q: q.model_copy(update={"elements": insert_at_end(q.elements, e)}) if q.id == e.question_id else q,
        )
    return _map_modules(
        tree,
        lambda m: m.model_copy(update={"elements": insert_at_end(m.elements, e)}) if m.id == e.module_id else m,
    )

def _element_changed(tree: FeedbackTree, event: ElementChanged) -> FeedbackTree:
    changed = event.element

    def swap(elements: List[ElementOut]) -> List[ElementOut]:
        if not any(e.id == changed.id for e in elements):
            return elements
        return [changed.model_copy(update={"position": e.position}) if e.id == changed.id else e for e in elements]

    tree = _map_modules(tree, lambda m: m.model_copy(update={"elements": swap(m.elements)}))
    return _map_questions(tree, lambda q: q.model_copy(update={"elements": swap(q.elements)}))

def _element_removed(tree: FeedbackTree, event: ElementRemoved) -> FeedbackTree:
    def drop(elements: List[ElementOut]) -> List[ElementOut]:
        return [e for e in elements if e.id != event.element_id]

    tree = _map_modules(tree, lambda m: m.model_copy(update={"elements": drop(m.elements)}))
    return _map_questions(tree, lambda q: q.model_copy(update={"elements": drop(q.elements)}))

def _modules_reordered(tree: FeedbackTree, event: ModulesReordered) -> FeedbackTree:
    return FeedbackTree(tuple(_reordered(tree.modules, event.ordered_ids)))

def _questions_reordered(tree: FeedbackTree, event: QuestionsReordered) -> FeedbackTree:
    return _map_modules(
        tree,
        lambda m: m.model_copy(update={"questions": _reordered(m.questions, event.ordered_ids)})
        if m.id == event.module_id else m,
    )

def _elements_reordered(tree: FeedbackTree, event: ElementsReordered) -> FeedbackTree:
    if event.question_id is not None:
        return _map_questions(
            tree,
            lambda q: q.model_copy(update={"elements": _reordered(q.elements, event.ordered_ids)})
            if q.id == event.question_id else q,
        )
    return _map_modules(
        tree,
        lambda m: m.model_copy(update={"elements": _reordered(m.elements, event.ordered_ids)})
        if m.id == event.module_id else m,
    )

_REDUCERS: Dict[type, Callable[[FeedbackTree, Event], FeedbackTree]] = {
    TreeLoaded: _tree_loaded,
    ModuleAdded: _module_added,
    ModuleChanged: _module_changed,
    ModuleRenamed: _module_renamed,
    ModuleRemoved: _module_removed,
    QuestionAdded: _question_added,
    QuestionChanged: _question_changed,
    QuestionRenamed: _question_renamed,
    QuestionRemoved: _question_removed,
    ElementAdded: _element_added,
    ElementChanged: _element_changed,
    ElementRemoved: _element_removed,
    ModulesReordered: _modules_reordered,
    QuestionsReordered: _questions_reordered,
    ElementsReordered: _elements_reordered,
}

def reduce(tree: FeedbackTree, event: Event) -> FeedbackTree:
    try:
        reducer = _REDUCERS[type(event)]
    except KeyError:
        raise TypeError(f"Unknown tree event: {event!r}")
    return reducer(tree, event)
