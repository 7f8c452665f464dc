import re
from typing import Any, Dict

PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$")
MAX_SCORE = 100


def extract_contact_info(answers: Dict[str, Any]) -> Dict[str, str]:
    """Guess name, email and phone from free-text answers. Later answers win."""
    contact: Dict[str, str] = {}
    for answer in answers.values():
        if not isinstance(answer, str):
            continue
        if "@" in answer and "." in answer:
            contact["email"] = answer
        elif PHONE_PATTERN.match(answer):
            contact["phone"] = answer
        elif 2 < len(answer) < 50:
            contact["name"] = answer
    return contact


def calculate_lead_score(answers: Dict[str, Any], contact: Dict[str, str]) -> int:
    score = 0

    if contact.get("email"):
        score += 20
    if contact.get("phone"):
        score += 15
    if contact.get("name"):
        score += 10

    total_answers = len(answers)
    if total_answers > 5:
        score += 20
    elif total_answers > 3:
        score += 15
    elif total_answers > 1:
        score += 10

    for answer in answers.values():
        if isinstance(answer, str) and len(answer) > 20:
            score += 5
        if isinstance(answer, list) and len(answer) > 2:
            score += 10

    return min(score, MAX_SCORE)


def score_submission(answers: Dict[str, Any]):
    contact = extract_contact_info(answers)
    return contact, calculate_lead_score(answers, contact)
