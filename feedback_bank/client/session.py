"""
Editor-side state: a local tree kept in step with the server.

Module and question renames are applied to the local tree before the request
goes out and rolled back if it fails. Creates, deletes and element edits wait
for the server's row. Drag-and-drop reorders renumber locally at once and are
persisted through the bulk reorder endpoints after a debounce delay; a failed
persist is logged and the local order is kept until the next refresh.
"""
from typing import Callable, Dict, Hashable, List, Optional, Sequence
import logging
import threading

from feedback_bank.client import tree as t
from feedback_bank.client.api import FeedbackClient
from feedback_bank.client.search import filter_modules
from feedback_bank.core.config import settings
from feedback_bank.models.schemas import ElementOut, ModuleOut, QuestionOut
from feedback_bank.services.ordering import move_to

logger = logging.getLogger(__name__)

class ReorderPersister:
    """Debounces reorder saves per sibling scope; the last order inside the window wins."""

    def __init__(self, delay: float):
        self.delay = delay
        self._lock = threading.Lock()
        self._pending: Dict[Hashable, Callable[[], None]] = {}
        self._timers: Dict[Hashable, threading.Timer] = {}

    def schedule(self, scope: Hashable, save: Callable[[], None]) -> None:
        with self._lock:
            timer = self._timers.pop(scope, None)
            if timer is not None:
                timer.cancel()
            self._pending[scope] = save
            timer = threading.Timer(self.delay, self._fire, args=(scope,))
            timer.daemon = True
            self._timers[scope] = timer
            timer.start()

    def _fire(self, scope: Hashable) -> None:
        with self._lock:
            self._timers.pop(scope, None)
            save = self._pending.pop(scope, None)
        if save is not None:
            self._run(scope, save)

    @staticmethod
    def _run(scope: Hashable, save: Callable[[], None]) -> None:
        try:
            save()
        except Exception as e:
            logger.error(f"Failed to persist order for {scope}: {e}", exc_info=True)

    def pending(self) -> List[Hashable]:
        with self._lock:
            return list(self._pending)

    def flush(self) -> None:
        """Persist everything scheduled right now, on the calling thread."""
        with self._lock:
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()
            pending, self._pending = self._pending, {}
        for scope, save in pending.items():
            self._run(scope, save)

    def cancel(self) -> None:
        with self._lock:
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()
            self._pending.clear()

class EditorSession:
    def __init__(self, client: FeedbackClient, debounce: Optional[float] = None):
        self.client = client
        self.tree = t.FeedbackTree()
        self.persister = ReorderPersister(settings.REORDER_DEBOUNCE_SECONDS if debounce is None else debounce)
        self._lock = threading.RLock()

    def _apply(self, event: t.Event) -> t.FeedbackTree:
        with self._lock:
            self.tree = t.reduce(self.tree, event)
            return self.tree

    @property
    def modules(self) -> Sequence[ModuleOut]:
        return self.tree.modules

    def refresh(self) -> t.FeedbackTree:
        """Replace the local tree with the server's."""
        return self._apply(t.TreeLoaded(self.client.list_modules()))

    def search(self, term: str) -> List[ModuleOut]:
        return filter_modules(self.tree.modules, term)

    # ----- modules -----

    def add_module(self, title: str, description: Optional[str] = None) -> ModuleOut:
        module = self.client.create_module(title, description)
        self._apply(t.ModuleAdded(module))
        return module

    def rename_module(self, module_id: str, title: str) -> ModuleOut:
        previous = self.tree.module(module_id)
        if previous is None:
            raise KeyError(module_id)
        self._apply(t.ModuleRenamed(module_id, title.strip()))
        try:
            module = self.client.update_module(module_id, title)
        except Exception:
            self._apply(t.ModuleRenamed(module_id, previous.title))
            raise
        self._apply(t.ModuleChanged(module))
        return module

    def remove_module(self, module_id: str) -> None:
        self.client.delete_module(module_id)
        self._apply(t.ModuleRemoved(module_id))

    def reorder_modules(self, ordered_ids: Sequence[str]) -> None:
        tree = self._apply(t.ModulesReordered(list(ordered_ids)))
        ids = tree.module_ids()
        self.persister.schedule("modules", lambda: self.client.reorder_modules(ids))

    def move_module(self, module_id: str, index: int) -> None:
        """Drop one module at ``index`` (0-based, clamped); persisted like any reorder."""
        self.reorder_modules([m.id for m in move_to(self.tree.modules, module_id, index)])

    # ----- questions -----

    def add_question(self, module_id: str, title: str, description: Optional[str] = None) -> QuestionOut:
        question = self.client.create_question(module_id, title, description)
        self._apply(t.QuestionAdded(question))
        return question

    def rename_question(self, question_id: str, title: str) -> QuestionOut:
        previous = self.tree.question(question_id)
        if previous is None:
            raise KeyError(question_id)
        self._apply(t.QuestionRenamed(question_id, title.strip()))
        try:
            question = self.client.update_question(previous.module_id, question_id, title)
        except Exception:
            self._apply(t.QuestionRenamed(question_id, previous.title))
            raise
        self._apply(t.QuestionChanged(question))
        return question

    def remove_question(self, question_id: str) -> None:
        question = self.tree.question(question_id)
        if question is None:
            raise KeyError(question_id)
        self.client.delete_question(question.module_id, question_id)
        self._apply(t.QuestionRemoved(question_id))

    def reorder_questions(self, module_id: str, ordered_ids: Sequence[str]) -> None:
        tree = self._apply(t.QuestionsReordered(module_id, list(ordered_ids)))
        ids = [q.id for q in tree.module(module_id).questions]
        self.persister.schedule(("questions", module_id), lambda: self.client.reorder_questions(module_id, ids))

    def move_question(self, question_id: str, index: int) -> None:
        question = self.tree.question(question_id)
        if question is None:
            raise KeyError(question_id)
        siblings = self.tree.module(question.module_id).questions
        self.reorder_questions(question.module_id, [q.id for q in move_to(siblings, question_id, index)])

    # ----- elements -----

    def _element_parent(self, element_id: str):
        element = self.tree.element(element_id)
        if element is None:
            raise KeyError(element_id)
        if element.question_id is not None:
            return self.tree.question(element.question_id).module_id, element.question_id
        return element.module_id, None

    def add_element(self, content: str, module_id: str, question_id: Optional[str] = None) -> ElementOut:
        element = self.client.create_element(module_id, content, question_id=question_id)
        self._apply(t.ElementAdded(element))
        return element

    def edit_element(self, element_id: str, content: str) -> ElementOut:
        module_id, question_id = self._element_parent(element_id)
        element = self.client.update_element(module_id, element_id, content, question_id=question_id)
        self._apply(t.ElementChanged(element))
        return element

    def remove_element(self, element_id: str) -> None:
        module_id, question_id = self._element_parent(element_id)
        self.client.delete_element(module_id, element_id, question_id=question_id)
        self._apply(t.ElementRemoved(element_id))

    def reorder_elements(
        self, ordered_ids: Sequence[str], module_id: Optional[str] = None, question_id: Optional[str] = None
    ) -> None:
        tree = self._apply(t.ElementsReordered(list(ordered_ids), module_id=module_id, question_id=question_id))
        if question_id is not None:
            ids = [e.id for e in tree.question(question_id).elements]
            scope = ("elements", "question", question_id)
        else:
            ids = [e.id for e in tree.module(module_id).elements]
            scope = ("elements", "module", module_id)
        self.persister.schedule(
            scope, lambda: self.client.reorder_elements(ids, module_id=module_id, question_id=question_id)
        )

    def move_element(self, element_id: str, index: int) -> None:
        element = self.tree.element(element_id)
        if element is None:
            raise KeyError(element_id)
        if element.question_id is not None:
            siblings = self.tree.question(element.question_id).elements
        else:
            siblings = self.tree.module(element.module_id).elements
        ids = [e.id for e in move_to(siblings, element_id, index)]
        self.reorder_elements(ids, module_id=element.module_id, question_id=element.question_id)

    def flush(self) -> None:
        self.persister.flush()

    def close(self) -> None:
        self.persister.flush()
