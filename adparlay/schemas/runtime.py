from pydantic import BaseModel
from typing import Any, Dict, List, Optional, Tuple
from enum import Enum


class NavigationAction(str, Enum):
    START = "start"
    ANSWER = "answer"
    NEXT = "next"
    PREVIOUS = "previous"


class NavigatorState(BaseModel):
    block_index: int = 0
    question_index: int = 0
    hidden_blocks: List[str] = []
    answers: Dict[str, Any] = {}
    history: List[Tuple[int, int]] = []
    completed: bool = False


class NavigateRequest(BaseModel):
    action: NavigationAction
    state: Optional[NavigatorState] = None
    question_id: Optional[str] = None
    value: Any = None


class NavigateResponse(BaseModel):
    state: NavigatorState
    current_block_id: Optional[str] = None
    current_block_title: Optional[str] = None
    current_question_id: Optional[str] = None
    completed: bool
    block_complete: bool
    missing_required: List[str] = []
