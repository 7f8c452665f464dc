# File: adparlay/schemas/form.py
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from enum import Enum


class QuestionType(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    PHONE = "phone"
    NUMBER = "number"
    TEXTAREA = "textarea"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    RATING = "rating"
    FILE = "file"
    DATE = "date"


class LogicAction(str, Enum):
    SHOW = "show"
    HIDE = "hide"
    JUMP = "jump"


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    EMBED = "embed"
    NONE = ""


class ConditionalRule(BaseModel):
    option: str
    target_block_id: Optional[str] = Field(None, alias="targetBlockId")
    action: LogicAction = LogicAction.SHOW

    class Config:
        populate_by_name = True
        use_enum_values = True


class Block(BaseModel):
    id: str
    title: str = "New Question Block"
    is_editing: bool = Field(False, alias="isEditing")

    class Config:
        populate_by_name = True
        use_enum_values = True


class Question(BaseModel):
    id: str
    type: QuestionType = QuestionType.TEXT
    label: str = "New Question"
    help_text: Optional[str] = Field(None, alias="helpText")
    required: bool = False
    is_editing: bool = Field(False, alias="isEditing")
    options: List[str] = []
    block_id: str = Field(..., alias="blockId")
    conditional_logic: List[ConditionalRule] = Field(default_factory=list, alias="conditionalLogic")

    class Config:
        populate_by_name = True
        use_enum_values = True


class Media(BaseModel):
    type: MediaType = MediaType.NONE
    url: str = ""
    primary_text: Optional[str] = Field("", alias="primaryText")
    secondary_text: Optional[str] = Field("", alias="secondaryText")
    description: Optional[str] = ""
    link: Optional[str] = ""

    class Config:
        populate_by_name = True
        use_enum_values = True


class FormBase(BaseModel):
    title: str = "Untitled Form"
    form_name: Optional[str] = None
    blocks: List[Block] = []
    questions: List[Question] = []
    media: Media = Media()
    form_style: Dict[str, Any] = {}


class FormCreate(FormBase):
    is_published: bool = False


class FormUpdate(BaseModel):
    title: Optional[str] = None
    form_name: Optional[str] = None
    blocks: Optional[List[Block]] = None
    questions: Optional[List[Question]] = None
    media: Optional[Media] = None
    form_style: Optional[Dict[str, Any]] = None
    is_published: Optional[bool] = None


class FormPublish(BaseModel):
    is_published: bool


class FormResponse(FormBase):
    id: str
    user_id: int
    is_published: bool
    share_url: Optional[str] = None
    short_share_url: Optional[str] = None
    responses_count: int = 0
    last_response_at: Optional[datetime] = None
    has_zapier_integration: bool = False
    has_crm_integration: bool = False
    crm_type: Optional[str] = None
    has_google_sheets_integration: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PublicFormResponse(FormBase):
    """What an anonymous respondent gets: no owner or integration details."""
    id: str

    class Config:
        from_attributes = True


class FormListResponse(BaseModel):
    items: List[FormResponse]
    total: int


class StructureIssue(BaseModel):
    code: str
    message: str
    block_id: Optional[str] = None
    question_id: Optional[str] = None


class FormValidationResponse(BaseModel):
    valid: bool
    issues: List[StructureIssue]


# Builder operations

class BlockCreate(BaseModel):
    title: Optional[str] = None


class BlockOrder(BaseModel):
    block_ids: List[str]


class QuestionCreate(BaseModel):
    type: QuestionType = QuestionType.TEXT
    label: str = "New Question"
    help_text: Optional[str] = None
    required: bool = False
    options: List[str] = []


class QuestionTypeChange(BaseModel):
    type: QuestionType


class QuestionMove(BaseModel):
    block_id: str
    position: Optional[int] = None


class LogicRuleUpdate(BaseModel):
    option: str
    target_block_id: Optional[str] = None
    action: LogicAction = LogicAction.SHOW


class FormTemplateSummary(BaseModel):
    key: str
    name: str
    icon: str
    description: str
    blocks: int
    questions: int
