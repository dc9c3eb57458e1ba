from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from feedback_bank.core.database import get_db
from feedback_bank.models.orm import FeedbackModule, FeedbackQuestion
from feedback_bank.models.schemas import (
    Envelope, MessageResponse, QuestionCreate, QuestionListResponse, QuestionOut, QuestionResponse,
    QuestionUpdate, ReorderRequest,
)
from feedback_bank.services.store import (
    create_child, delete_row, get_or_404, question_scope, supplied_fields, update_row,
)

router = APIRouter()

@router.get("/{module_id}/questions", response_model=QuestionListResponse)
def list_questions(module_id: str, db: Session = Depends(get_db)):
    get_or_404(db, FeedbackModule, "Module", module_id)
    rows = question_scope(module_id).children(db)
    return QuestionListResponse(questions=[QuestionOut.model_validate(q) for q in rows])

@router.post("/{module_id}/questions", response_model=QuestionResponse)
def create_question(module_id: str, payload: QuestionCreate, db: Session = Depends(get_db)):
    get_or_404(db, FeedbackModule, "Module", module_id)
    question = FeedbackQuestion(module_id=module_id, title=payload.title, description=payload.description)
    question = create_child(db, question_scope(module_id), question)
    return QuestionResponse(question=QuestionOut.model_validate(question))

@router.patch("/{module_id}/questions/reorder", response_model=Envelope)
def reorder_questions(module_id: str, payload: ReorderRequest, db: Session = Depends(get_db)):
    get_or_404(db, FeedbackModule, "Module", module_id)
    question_scope(module_id).reorder(db, payload.ordered_ids)
    db.commit()
    return Envelope()

@router.get("/{module_id}/questions/{question_id}", response_model=QuestionResponse)
def get_question(module_id: str, question_id: str, db: Session = Depends(get_db)):
    question = get_or_404(db, FeedbackQuestion, "Question", question_id, module_id=module_id)
    return QuestionResponse(question=QuestionOut.model_validate(question))

@router.put("/{module_id}/questions/{question_id}", response_model=QuestionResponse)
def update_question(module_id: str, question_id: str, payload: QuestionUpdate, db: Session = Depends(get_db)):
    question = get_or_404(db, FeedbackQuestion, "Question", question_id, module_id=module_id)
    question = update_row(db, question, supplied_fields(payload))
    return QuestionResponse(question=QuestionOut.model_validate(question))

@router.delete("/{module_id}/questions/{question_id}", response_model=MessageResponse)
def delete_question(module_id: str, question_id: str, db: Session = Depends(get_db)):
    question = get_or_404(db, FeedbackQuestion, "Question", question_id, module_id=module_id)
    delete_row(db, question)
    return MessageResponse(message="Question deleted successfully")
