"""
Conditional branching runtime for multi-step forms.

A form is an ordered list of blocks, each holding an ordered list of
questions. The navigator walks them question by question. Choice questions
may carry per-option rules:

    {"option": "Yes", "targetBlockId": "block-2", "action": "jump"}

``jump`` moves to the first question of the target block, ``show`` and
``hide`` toggle the target's visibility and then continue linearly. Hidden
blocks are skipped by linear advance. Rules pointing at blocks that do not
exist are ignored.

Blocks and questions are the plain dicts stored on the form, so legacy data
that never went through schema validation can still be walked.
"""
import logging
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

JUMP = "jump"
SHOW = "show"
HIDE = "hide"


class NavigationError(Exception):
    """Raised when a step does not make sense for the current position."""


def is_answered(question: Dict[str, Any], value: Any) -> bool:
    """Whether ``value`` satisfies a required ``question``."""
    if question.get("type") == "checkbox":
        return isinstance(value, (list, tuple)) and len(value) > 0
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) > 0
    return True


def _selected_options(value: Any) -> List[str]:
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(v) for v in value]
    return [str(value)]


def match_rule(question: Dict[str, Any], value: Any) -> Optional[Dict[str, Any]]:
    """First rule of ``question`` whose option is among the selected value(s)."""
    selected = _selected_options(value)
    if not selected:
        return None
    for rule in question.get("conditionalLogic") or []:
        if rule.get("option") in selected:
            return rule
    return None


def initially_hidden_blocks(questions: List[Dict[str, Any]]) -> Set[str]:
    """Blocks revealed by a ``show`` rule stay hidden until that rule fires."""
    hidden = set()
    for question in questions:
        for rule in question.get("conditionalLogic") or []:
            if rule.get("action") == SHOW and rule.get("targetBlockId"):
                hidden.add(rule["targetBlockId"])
    return hidden


class FormNavigator:
    def __init__(
        self,
        blocks: List[Dict[str, Any]],
        questions: List[Dict[str, Any]],
        state: Optional[Dict[str, Any]] = None,
    ):
        self.blocks = list(blocks or [])
        self.questions = list(questions or [])
        self._block_positions = {
            block.get("id"): idx for idx, block in enumerate(self.blocks) if block.get("id")
        }
        self._questions_by_id = {q.get("id"): q for q in self.questions if q.get("id")}
        self.visited: List[str] = []

        if state is None:
            self.block_index = 0
            self.question_index = 0
            self.hidden_blocks = initially_hidden_blocks(self.questions)
            self.answers: Dict[str, Any] = {}
            self.history: List[Tuple[int, int]] = []
            self.completed = False
            self._seek(0)
        else:
            self.block_index = int(state.get("block_index", 0))
            self.question_index = int(state.get("question_index", 0))
            self.hidden_blocks = set(state.get("hidden_blocks") or [])
            self.answers = dict(state.get("answers") or {})
            self.history = [tuple(step) for step in state.get("history") or []]
            self.completed = bool(state.get("completed", False))
            # The form may have been edited since the state was issued
            if not self.completed and self.current_question() is None:
                self._seek(self.block_index)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def questions_for_block(self, block_id: Optional[str]) -> List[Dict[str, Any]]:
        return [q for q in self.questions if q.get("blockId") == block_id]

    def current_block(self) -> Optional[Dict[str, Any]]:
        if self.completed or not (0 <= self.block_index < len(self.blocks)):
            return None
        return self.blocks[self.block_index]

    def current_question(self) -> Optional[Dict[str, Any]]:
        block = self.current_block()
        if block is None:
            return None
        block_questions = self.questions_for_block(block.get("id"))
        if 0 <= self.question_index < len(block_questions):
            return block_questions[self.question_index]
        return None

    def is_visible(self, block_id: str) -> bool:
        return block_id not in self.hidden_blocks

    def block_complete(self, block_id: Optional[str] = None) -> bool:
        """All required questions of the block (default: current) are answered."""
        if block_id is None:
            block = self.current_block()
            if block is None:
                return True
            block_id = block.get("id")
        return all(
            is_answered(q, self.answers.get(q.get("id")))
            for q in self.questions_for_block(block_id)
            if q.get("required")
        )

    def missing_in_block(self, block_id: Optional[str] = None) -> List[str]:
        if block_id is None:
            block = self.current_block()
            if block is None:
                return []
            block_id = block.get("id")
        return [
            q.get("id")
            for q in self.questions_for_block(block_id)
            if q.get("required") and not is_answered(q, self.answers.get(q.get("id")))
        ]

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------
    def _seek(self, block_index: int) -> None:
        """Land on the first question of the first visible, non-empty block at or after ``block_index``."""
        idx = max(block_index, 0)
        while idx < len(self.blocks):
            block_id = self.blocks[idx].get("id")
            if self.is_visible(block_id) and self.questions_for_block(block_id):
                self.block_index = idx
                self.question_index = 0
                self.completed = False
                return
            idx += 1
        self.completed = True

    def _advance(self) -> None:
        block = self.current_block()
        if block is None:
            self.completed = True
            return
        if self.question_index + 1 < len(self.questions_for_block(block.get("id"))):
            self.question_index += 1
        else:
            self._seek(self.block_index + 1)

    def _apply_rule(self, rule: Dict[str, Any]) -> None:
        target = rule.get("targetBlockId")
        action = rule.get("action", SHOW)
        if target not in self._block_positions:
            logger.debug(f"Ignoring rule with unknown target block {target!r}")
            self._advance()
            return

        if action == JUMP:
            self.hidden_blocks.discard(target)
            self._seek(self._block_positions[target])
        elif action == SHOW:
            self.hidden_blocks.discard(target)
            self._advance()
        elif action == HIDE:
            self.hidden_blocks.add(target)
            self._advance()
        else:
            self._advance()

    def answer(self, question_id: str, value: Any) -> None:
        """Answer the current question and move on according to its rules."""
        if self.completed:
            raise NavigationError("Form is already complete")
        question = self.current_question()
        if question is None or question.get("id") != question_id:
            raise NavigationError(f"Question {question_id} is not the current question")

        self.answers[question_id] = value
        self.history.append((self.block_index, self.question_index))

        rule = match_rule(question, value)
        if rule is None:
            self._advance()
        else:
            self._apply_rule(rule)

    def next(self) -> None:
        """Skip the current question without answering it."""
        if self.completed:
            return
        self.history.append((self.block_index, self.question_index))
        self._advance()

    def previous(self) -> None:
        if not self.history:
            return
        self.block_index, self.question_index = self.history.pop()
        self.completed = False

    # ------------------------------------------------------------------
    # Whole-form helpers
    # ------------------------------------------------------------------
    @classmethod
    def replay(
        cls,
        blocks: List[Dict[str, Any]],
        questions: List[Dict[str, Any]],
        answers: Dict[str, Any],
    ) -> "FormNavigator":
        """Walk the form from the start using ``answers``; ``visited`` holds the path taken."""
        navigator = cls(blocks, questions)
        seen: Set[Tuple[int, int, FrozenSet[str]]] = set()

        while not navigator.completed:
            key = (navigator.block_index, navigator.question_index, frozenset(navigator.hidden_blocks))
            if key in seen:
                logger.warning("Conditional logic loops back on itself; stopping replay")
                break
            seen.add(key)

            question = navigator.current_question()
            if question is None:
                break
            question_id = question.get("id")
            if question_id not in navigator.visited:
                navigator.visited.append(question_id)

            value = answers.get(question_id)
            if value is None or value == "":
                navigator.next()
            else:
                navigator.answer(question_id, value)

        return navigator

    def missing_required(self) -> List[str]:
        """Required questions on the visited path that have no usable answer."""
        missing = []
        for question_id in self.visited:
            question = self._questions_by_id.get(question_id)
            if question and question.get("required") and not is_answered(question, self.answers.get(question_id)):
                missing.append(question_id)
        return missing

    def to_state(self) -> Dict[str, Any]:
        return {
            "block_index": self.block_index,
            "question_index": self.question_index,
            "hidden_blocks": sorted(self.hidden_blocks),
            "answers": dict(self.answers),
            "history": [list(step) for step in self.history],
            "completed": self.completed,
        }
