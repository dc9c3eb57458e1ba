from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from feedback_bank.core.database import get_db
from feedback_bank.models.orm import FeedbackElement, FeedbackModule, FeedbackQuestion
from feedback_bank.models.schemas import (
    ElementCreate, ElementOut, ElementReorderRequest, ElementResponse, ElementUpdate, Envelope, MessageResponse,
)
from feedback_bank.services.store import (
    create_child, delete_row, element_scope, get_or_404, supplied_fields, update_row,
)

router = APIRouter()

def _element(db: Session, element_id: str, module_id: Optional[str] = None, question_id: Optional[str] = None):
    if question_id is not None:
        return get_or_404(db, FeedbackElement, "Element", element_id, question_id=question_id)
    return get_or_404(db, FeedbackElement, "Element", element_id, module_id=module_id)

@router.patch("/elements/reorder", response_model=Envelope)
def reorder_elements(payload: ElementReorderRequest, db: Session = Depends(get_db)):
    if payload.question_id is not None:
        get_or_404(db, FeedbackQuestion, "Question", payload.question_id)
    else:
        get_or_404(db, FeedbackModule, "Module", payload.module_id)
    element_scope(payload.module_id, payload.question_id).reorder(db, payload.ordered_ids)
    db.commit()
    return Envelope()

# ----- elements attached directly to a module -----

@router.post("/{module_id}/elements", response_model=ElementResponse)
def create_module_element(module_id: str, payload: ElementCreate, db: Session = Depends(get_db)):
    get_or_404(db, FeedbackModule, "Module", module_id)
    element = create_child(db, element_scope(module_id=module_id), FeedbackElement(module_id=module_id, content=payload.content))
    return ElementResponse(element=ElementOut.model_validate(element))

@router.get("/{module_id}/elements/{element_id}", response_model=ElementResponse)
def get_module_element(module_id: str, element_id: str, db: Session = Depends(get_db)):
    return ElementResponse(element=ElementOut.model_validate(_element(db, element_id, module_id=module_id)))

@router.put("/{module_id}/elements/{element_id}", response_model=ElementResponse)
def update_module_element(module_id: str, element_id: str, payload: ElementUpdate, db: Session = Depends(get_db)):
    element = update_row(db, _element(db, element_id, module_id=module_id), supplied_fields(payload))
    return ElementResponse(element=ElementOut.model_validate(element))

@router.delete("/{module_id}/elements/{element_id}", response_model=MessageResponse)
def delete_module_element(module_id: str, element_id: str, db: Session = Depends(get_db)):
    delete_row(db, _element(db, element_id, module_id=module_id))
    return MessageResponse(message="Element deleted successfully")

# ----- elements under a question -----

@router.post("/{module_id}/questions/{question_id}/elements", response_model=ElementResponse)
def create_question_element(module_id: str, question_id: str, payload: ElementCreate, db: Session = Depends(get_db)):
    get_or_404(db, FeedbackQuestion, "Question", question_id, module_id=module_id)
    element = FeedbackElement(question_id=question_id, content=payload.content)
    element = create_child(db, element_scope(question_id=question_id), element)
    return ElementResponse(element=ElementOut.model_validate(element))

@router.get("/{module_id}/questions/{question_id}/elements/{element_id}", response_model=ElementResponse)
def get_question_element(module_id: str, question_id: str, element_id: str, db: Session = Depends(get_db)):
    get_or_404(db, FeedbackQuestion, "Question", question_id, module_id=module_id)
    return ElementResponse(element=ElementOut.model_validate(_element(db, element_id, question_id=question_id)))

@router.put("/{module_id}/questions/{question_id}/elements/{element_id}", response_model=ElementResponse)
def update_question_element(
    module_id: str, question_id: str, element_id: str, payload: ElementUpdate, db: Session = Depends(get_db)
):
    get_or_404(db, FeedbackQuestion, "Question", question_id, module_id=module_id)
    element = update_row(db, _element(db, element_id, question_id=question_id), supplied_fields(payload))
    return ElementResponse(element=ElementOut.model_validate(element))

@router.delete("/{module_id}/questions/{question_id}/elements/{element_id}", response_model=MessageResponse)
def delete_question_element(module_id: str, question_id: str, element_id: str, db: Session = Depends(get_db)):
    get_or_404(db, FeedbackQuestion, "Question", question_id, module_id=module_id)
    delete_row(db, _element(db, element_id, question_id=question_id))
    return MessageResponse(message="Element deleted successfully")
