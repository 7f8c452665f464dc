"""Builder operations over a form's block and question lists."""
import copy
import time
import uuid
from typing import Any, Dict, List, Optional, Tuple

CHOICE_TYPES = {"select", "radio", "checkbox", "rating"}
OPTION_TYPES = CHOICE_TYPES | {"file"}
LOGIC_ACTIONS = {"show", "hide", "jump"}

DEFAULT_RATING_OPTIONS = ["1", "2", "3", "4", "5"]
DEFAULT_FILE_OPTIONS = [".pdf", ".doc", ".docx", ".jpg", ".png", ".gif"]

Blocks = List[Dict[str, Any]]
Questions = List[Dict[str, Any]]


class FormStructureError(Exception):
    def __init__(self, issues: List[Dict[str, Any]]):
        self.issues = issues
        super().__init__("; ".join(issue["message"] for issue in issues))


def _new_id(prefix: str) -> str:
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


def new_question(block_id: str, **fields) -> Dict[str, Any]:
    question = {
        "id": _new_id("question"),
        "type": "text",
        "label": "New Question",
        "helpText": "",
        "required": False,
        "isEditing": False,
        "blockId": block_id,
        "options": [],
        "conditionalLogic": [],
    }
    question.update({k: v for k, v in fields.items() if v is not None})
    return question


def new_block(title: Optional[str] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """A fresh block and the default question that comes with it."""
    block = {"id": _new_id("block"), "title": title or "New Question Block", "isEditing": True}
    question = new_question(block["id"], helpText="Enter your question here", isEditing=True)
    return block, question


def add_block(blocks: Blocks, questions: Questions, title: Optional[str] = None) -> Tuple[Blocks, Questions, Dict[str, Any]]:
    block, question = new_block(title)
    return blocks + [block], questions + [question], block


def add_question(blocks: Blocks, questions: Questions, block_id: str, **fields) -> Tuple[Questions, Dict[str, Any]]:
    if not any(b.get("id") == block_id for b in blocks):
        raise KeyError(block_id)
    question = new_question(block_id, **fields)
    if question["type"] in OPTION_TYPES and not question["options"]:
        question["options"] = _default_options(question["type"])
    return questions + [question], question


def _prune_rules_targeting(questions: Questions, block_id: str) -> Questions:
    pruned = []
    for question in questions:
        rules = question.get("conditionalLogic") or []
        kept = [rule for rule in rules if rule.get("targetBlockId") != block_id]
        if len(kept) != len(rules):
            question = {**question, "conditionalLogic": kept}
        pruned.append(question)
    return pruned


def remove_block(blocks: Blocks, questions: Questions, block_id: str) -> Tuple[Blocks, Questions]:
    """Drop the block, its questions, and every rule that pointed at it."""
    if not any(b.get("id") == block_id for b in blocks):
        raise KeyError(block_id)
    remaining_blocks = [b for b in blocks if b.get("id") != block_id]
    remaining_questions = [q for q in questions if q.get("blockId") != block_id]
    return remaining_blocks, _prune_rules_targeting(remaining_questions, block_id)


def remove_question(questions: Questions, question_id: str) -> Questions:
    if not any(q.get("id") == question_id for q in questions):
        raise KeyError(question_id)
    return [q for q in questions if q.get("id") != question_id]


def reorder_blocks(blocks: Blocks, block_ids: List[str]) -> Blocks:
    by_id = {b.get("id"): b for b in blocks}
    if sorted(by_id) != sorted(block_ids):
        raise ValueError("block_ids must list every block exactly once")
    return [by_id[block_id] for block_id in block_ids]


def move_question(blocks: Blocks, questions: Questions, question_id: str, block_id: str, position: Optional[int] = None) -> Questions:
    """Move a question into ``block_id`` at ``position`` within that block (end by default)."""
    if not any(b.get("id") == block_id for b in blocks):
        raise KeyError(block_id)
    moving = next((q for q in questions if q.get("id") == question_id), None)
    if moving is None:
        raise KeyError(question_id)

    moving = {**moving, "blockId": block_id}
    rest = [q for q in questions if q.get("id") != question_id]
    in_block = [i for i, q in enumerate(rest) if q.get("blockId") == block_id]

    if not in_block:
        insert_at = len(rest)
    elif position is None or position >= len(in_block):
        insert_at = in_block[-1] + 1
    else:
        insert_at = in_block[max(position, 0)]
    return rest[:insert_at] + [moving] + rest[insert_at:]


def _default_options(question_type: str) -> List[str]:
    if question_type == "rating":
        return list(DEFAULT_RATING_OPTIONS)
    if question_type == "file":
        return list(DEFAULT_FILE_OPTIONS)
    return []


def change_question_type(questions: Questions, question_id: str, new_type: str) -> Questions:
    updated = []
    found = False
    for question in questions:
        if question.get("id") == question_id:
            found = True
            options = list(question.get("options") or [])
            if new_type not in OPTION_TYPES:
                options = []
            elif not options:
                options = _default_options(new_type)
            question = {**question, "type": new_type, "options": options}
            # Rules only make sense on choice questions
            if new_type not in CHOICE_TYPES:
                question["conditionalLogic"] = []
        updated.append(question)
    if not found:
        raise KeyError(question_id)
    return updated


def set_conditional_logic(
    questions: Questions,
    question_id: str,
    option: str,
    target_block_id: Optional[str],
    action: str = "show",
) -> Questions:
    """Replace the rule for ``option``; an empty target removes it."""
    if action not in LOGIC_ACTIONS:
        raise ValueError(f"Unknown logic action: {action}")
    updated = []
    found = False
    for question in questions:
        if question.get("id") == question_id:
            found = True
            rules = [r for r in question.get("conditionalLogic") or [] if r.get("option") != option]
            if target_block_id:
                rules.append({"option": option, "targetBlockId": target_block_id, "action": action})
            question = {**question, "conditionalLogic": rules}
        updated.append(question)
    if not found:
        raise KeyError(question_id)
    return updated


def duplicate_structure(blocks: Blocks, questions: Questions) -> Tuple[Blocks, Questions]:
    """Deep copy with fresh ids, rewriting question and rule references."""
    block_map = {b.get("id"): _new_id("block") for b in blocks}
    new_blocks = [{**copy.deepcopy(b), "id": block_map[b.get("id")]} for b in blocks]
    new_questions = []
    for question in questions:
        question = copy.deepcopy(question)
        question["id"] = _new_id("question")
        question["blockId"] = block_map.get(question.get("blockId"), question.get("blockId"))
        for rule in question.get("conditionalLogic") or []:
            if rule.get("targetBlockId") in block_map:
                rule["targetBlockId"] = block_map[rule["targetBlockId"]]
        new_questions.append(question)
    return new_blocks, new_questions


def validate_structure(blocks: Blocks, questions: Questions) -> List[Dict[str, Any]]:
    issues: List[Dict[str, Any]] = []
    block_ids = set()

    for block in blocks:
        block_id = block.get("id")
        if block_id in block_ids:
            issues.append({"code": "duplicate_block_id", "message": f"Duplicate block id {block_id}", "block_id": block_id})
        block_ids.add(block_id)

    question_ids = set()
    for question in questions:
        question_id = question.get("id")
        if question_id in question_ids:
            issues.append({"code": "duplicate_question_id", "message": f"Duplicate question id {question_id}", "question_id": question_id})
        question_ids.add(question_id)

        if question.get("blockId") not in block_ids:
            issues.append({
                "code": "missing_block",
                "message": f"Question {question_id} belongs to unknown block {question.get('blockId')}",
                "question_id": question_id,
                "block_id": question.get("blockId"),
            })

        rules = question.get("conditionalLogic") or []
        if rules and question.get("type") not in CHOICE_TYPES:
            issues.append({
                "code": "logic_on_non_choice",
                "message": f"Question {question_id} of type {question.get('type')} cannot carry conditional logic",
                "question_id": question_id,
            })
        options = question.get("options") or []
        for rule in rules:
            target = rule.get("targetBlockId")
            if not target:
                issues.append({"code": "rule_without_target", "message": f"Rule on {question_id} has no target block", "question_id": question_id})
            elif target not in block_ids:
                issues.append({
                    "code": "missing_target",
                    "message": f"Rule on {question_id} targets unknown block {target}",
                    "question_id": question_id,
                    "block_id": target,
                })
            if rule.get("option") not in options:
                issues.append({
                    "code": "unknown_option",
                    "message": f"Rule on {question_id} refers to option {rule.get('option')!r} which the question does not offer",
                    "question_id": question_id,
                })
            if rule.get("action") not in LOGIC_ACTIONS:
                issues.append({"code": "unknown_action", "message": f"Rule on {question_id} has unknown action {rule.get('action')!r}", "question_id": question_id})
    return issues


def ensure_valid(blocks: Blocks, questions: Questions) -> None:
    issues = validate_structure(blocks, questions)
    if issues:
        raise FormStructureError(issues)
