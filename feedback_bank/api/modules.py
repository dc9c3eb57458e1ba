from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from feedback_bank.core.database import get_db
from feedback_bank.models.orm import FeedbackModule, FeedbackQuestion
from feedback_bank.models.schemas import (
    Envelope, MessageResponse, ModuleCreate, ModuleListResponse, ModuleOut, ModuleResponse, ModuleUpdate,
    ReorderRequest,
)
from feedback_bank.services.store import (
    create_child, delete_row, get_or_404, module_scope, supplied_fields, update_row,
)

router = APIRouter()

def _with_tree():
    return (
        selectinload(FeedbackModule.questions).selectinload(FeedbackQuestion.elements),
        selectinload(FeedbackModule.elements),
    )

@router.get("", response_model=ModuleListResponse)
def list_modules(db: Session = Depends(get_db)):
    """Every module with its questions, their elements, and module-level elements, in display order."""
    rows = db.scalars(
        select(FeedbackModule).options(*_with_tree())
        .order_by(FeedbackModule.position.asc(), FeedbackModule.created_at.asc())
    ).all()
    return ModuleListResponse(modules=[ModuleOut.model_validate(m) for m in rows])

@router.post("", response_model=ModuleResponse)
def create_module(payload: ModuleCreate, db: Session = Depends(get_db)):
    module = create_child(db, module_scope(), FeedbackModule(title=payload.title, description=payload.description))
    return ModuleResponse(module=ModuleOut.model_validate(module))

@router.patch("/modules/reorder", response_model=Envelope)
def reorder_modules(payload: ReorderRequest, db: Session = Depends(get_db)):
    module_scope().reorder(db, payload.ordered_ids)
    db.commit()
    return Envelope()

@router.get("/{module_id}", response_model=ModuleResponse)
def get_module(module_id: str, db: Session = Depends(get_db)):
    module = get_or_404(db, FeedbackModule, "Module", module_id)
    return ModuleResponse(module=ModuleOut.model_validate(module))

@router.put("/{module_id}", response_model=ModuleResponse)
def update_module(module_id: str, payload: ModuleUpdate, db: Session = Depends(get_db)):
    module = get_or_404(db, FeedbackModule, "Module", module_id)
    # position moves this row only; siblings are left alone
    module = update_row(db, module, supplied_fields(payload))
    return ModuleResponse(module=ModuleOut.model_validate(module))

@router.delete("/{module_id}", response_model=MessageResponse)
def delete_module(module_id: str, db: Session = Depends(get_db)):
    module = get_or_404(db, FeedbackModule, "Module", module_id)
    delete_row(db, module)
    return MessageResponse(message="Module deleted successfully")
