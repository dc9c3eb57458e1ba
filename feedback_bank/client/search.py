import random
from typing import Iterable, List, Optional

from feedback_bank.models.schemas import ElementOut, ModuleOut, QuestionOut

def _matches(term: str, *texts: Optional[str]) -> bool:
    return any(term in text.lower() for text in texts if text)

def filter_question(question: QuestionOut, term: str) -> Optional[QuestionOut]:
    if _matches(term, question.title, question.description):
        return question
    elements = [e for e in question.elements if _matches(term, e.content)]
    return question.model_copy(update={"elements": elements}) if elements else None

def filter_module(module: ModuleOut, term: str) -> Optional[ModuleOut]:
    """A module matching on its own text keeps every child; otherwise only matching children survive."""
    if _matches(term, module.title, module.description):
        return module
    questions = [q for q in (filter_question(q, term) for q in module.questions) if q is not None]
    elements: List[ElementOut] = [e for e in module.elements if _matches(term, e.content)]
    if not questions and not elements:
        return None
    return module.model_copy(update={"questions": questions, "elements": elements})

def filter_modules(modules: Iterable[ModuleOut], term: str) -> List[ModuleOut]:
    """Case-insensitive substring filter over already-loaded data, for display only."""
    term = (term or "").strip().lower()
    if not term:
        return list(modules)
    return [m for m in (filter_module(m, term) for m in modules) if m is not None]

# ----- display-only shuffling -----

def shuffled_modules(modules: Iterable[ModuleOut], rng: Optional[random.Random] = None) -> List[ModuleOut]:
    """Modules in random display order; positions and children are left as they are."""
    out = list(modules)
    (rng or random).shuffle(out)
    return out

def shuffled_elements(
    modules: Iterable[ModuleOut], module_id: str, rng: Optional[random.Random] = None
) -> List[ModuleOut]:
    """Shuffle one module's own elements for display, keeping module order."""
    out = []
    for m in modules:
        if m.id == module_id:
            elements = list(m.elements)
            (rng or random).shuffle(elements)
            m = m.model_copy(update={"elements": elements})
        out.append(m)
    return out
