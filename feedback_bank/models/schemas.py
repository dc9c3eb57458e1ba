"""
Request and response schemas shared by the HTTP handlers and the client.

Payload keys are camelCase on the wire; requests also accept snake_case.
"""
from datetime import datetime
from typing import Any, ClassVar, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator, model_validator
from pydantic.alias_generators import to_camel

class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

def required_text(value: Any, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{label} is required")
    return value.strip()

def optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None

# ============= Requests =============

class TitledIn(ApiModel):
    """Title is mandatory and trimmed; description is optional and trimmed."""

    label: ClassVar[str] = "Title"

    title: Optional[str] = Field(default=None, validate_default=True)
    description: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def title_required(cls, v):
        return required_text(v, cls.label)

    @field_validator("description")
    @classmethod
    def trim_description(cls, v):
        return optional_text(v)

class ModuleCreate(TitledIn):
    label: ClassVar[str] = "Module title"

class ModuleUpdate(ModuleCreate):
    position: Optional[int] = Field(default=None, ge=1)

class QuestionCreate(TitledIn):
    label: ClassVar[str] = "Question title"

class QuestionUpdate(QuestionCreate):
    position: Optional[int] = Field(default=None, ge=1)

class ElementCreate(ApiModel):
    content: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("content", mode="before")
    @classmethod
    def content_required(cls, v):
        return required_text(v, "Element content")

class ElementUpdate(ElementCreate):
    position: Optional[int] = Field(default=None, ge=1)

class ReorderRequest(ApiModel):
    ordered_ids: List[str]

class ElementReorderRequest(ReorderRequest):
    module_id: Optional[str] = None
    question_id: Optional[str] = None

    @model_validator(mode="after")
    def single_parent(self):
        if (self.module_id is None) == (self.question_id is None):
            raise ValueError("Exactly one of moduleId or questionId is required")
        return self

class SiteLockUpdate(ApiModel):
    locked: StrictBool

# ============= Entities =============

class ElementOut(ApiModel):
    id: str
    module_id: Optional[str] = None
    question_id: Optional[str] = None
    content: str
    position: int
    created_at: datetime
    updated_at: datetime

class QuestionOut(ApiModel):
    id: str
    module_id: str
    title: str
    description: Optional[str] = None
    position: int
    created_at: datetime
    updated_at: datetime
    elements: List[ElementOut] = []

class ModuleOut(ApiModel):
    id: str
    title: str
    description: Optional[str] = None
    position: int
    created_at: datetime
    updated_at: datetime
    questions: List[QuestionOut] = []
    elements: List[ElementOut] = []

# ============= Envelopes =============

class Envelope(ApiModel):
    success: bool = True

class MessageResponse(Envelope):
    message: str

class ModuleListResponse(Envelope):
    modules: List[ModuleOut]

class ModuleResponse(Envelope):
    module: ModuleOut

class QuestionListResponse(Envelope):
    questions: List[QuestionOut]

class QuestionResponse(Envelope):
    question: QuestionOut

class ElementResponse(Envelope):
    element: ElementOut

class SiteLockResponse(Envelope):
    locked: bool
    lock_timestamp: Optional[str] = None
