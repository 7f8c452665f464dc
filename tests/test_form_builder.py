import pytest

from adparlay.services import form_builder
from adparlay.services.form_builder import FormStructureError
from adparlay.services.form_templates import FORM_TEMPLATES, instantiate_template, list_templates

from conftest import branching_form_payload


@pytest.fixture
def structure():
    payload = branching_form_payload()
    return payload["blocks"], payload["questions"]


def test_new_block_comes_with_a_default_question():
    block, question = form_builder.new_block()
    assert block["title"] == "New Question Block"
    assert question["blockId"] == block["id"]
    assert question["label"] == "New Question"
    assert question["type"] == "text"


def test_add_block_appends(structure):
    blocks, questions = structure
    new_blocks, new_questions, block = form_builder.add_block(blocks, questions, "Extras")
    assert new_blocks[-1] == block
    assert block["title"] == "Extras"
    assert len(new_questions) == len(questions) + 1
    assert len(blocks) == 4


def test_add_question_defaults_rating_options(structure):
    blocks, questions = structure
    updated, question = form_builder.add_question(blocks, questions, "contact", type="rating", label="How likely?")
    assert question["options"] == ["1", "2", "3", "4", "5"]
    assert updated[-1]["blockId"] == "contact"

    with pytest.raises(KeyError):
        form_builder.add_question(blocks, questions, "missing-block")


def test_remove_block_drops_questions_and_rules(structure):
    blocks, questions = structure
    new_blocks, new_questions = form_builder.remove_block(blocks, questions, "buyer")
    assert [b["id"] for b in new_blocks] == ["intro", "seller", "contact"]
    assert "q-budget" not in [q["id"] for q in new_questions]
    intent = next(q for q in new_questions if q["id"] == "q-intent")
    assert [r["targetBlockId"] for r in intent["conditionalLogic"]] == ["seller"]
    assert form_builder.validate_structure(new_blocks, new_questions) == []


def test_reorder_blocks_requires_every_block(structure):
    blocks, _ = structure
    reordered = form_builder.reorder_blocks(blocks, ["contact", "intro", "buyer", "seller"])
    assert [b["id"] for b in reordered] == ["contact", "intro", "buyer", "seller"]

    with pytest.raises(ValueError):
        form_builder.reorder_blocks(blocks, ["contact", "intro"])


def test_move_question_between_blocks(structure):
    blocks, questions = structure
    moved = form_builder.move_question(blocks, questions, "q-email", "intro", position=0)
    intro = [q["id"] for q in moved if q["blockId"] == "intro"]
    assert intro == ["q-email", "q-intent"]

    moved = form_builder.move_question(blocks, questions, "q-name", "contact")
    contact = [q["id"] for q in moved if q["blockId"] == "contact"]
    assert contact == ["q-email", "q-name"]


def test_change_type_to_text_clears_options_and_logic(structure):
    _, questions = structure
    updated = form_builder.change_question_type(questions, "q-intent", "text")
    intent = next(q for q in updated if q["id"] == "q-intent")
    assert intent["options"] == []
    assert intent["conditionalLogic"] == []


def test_change_type_keeps_choice_options(structure):
    _, questions = structure
    updated = form_builder.change_question_type(questions, "q-intent", "select")
    intent = next(q for q in updated if q["id"] == "q-intent")
    assert intent["options"] == ["Buy", "Sell"]
    assert len(intent["conditionalLogic"]) == 2


def test_set_conditional_logic_replaces_and_clears(structure):
    _, questions = structure
    updated = form_builder.set_conditional_logic(questions, "q-intent", "Buy", "contact", "jump")
    intent = next(q for q in updated if q["id"] == "q-intent")
    buy_rules = [r for r in intent["conditionalLogic"] if r["option"] == "Buy"]
    assert buy_rules == [{"option": "Buy", "targetBlockId": "contact", "action": "jump"}]

    cleared = form_builder.set_conditional_logic(updated, "q-intent", "Buy", None)
    intent = next(q for q in cleared if q["id"] == "q-intent")
    assert [r["option"] for r in intent["conditionalLogic"]] == ["Sell"]

    with pytest.raises(ValueError):
        form_builder.set_conditional_logic(questions, "q-intent", "Buy", "contact", "teleport")


def test_validate_structure_reports_broken_references(structure):
    blocks, questions = structure
    assert form_builder.validate_structure(blocks, questions) == []

    broken = questions + [
        {"id": "q-stray", "type": "text", "blockId": "nowhere"},
        {"id": "q-text-logic", "type": "text", "blockId": "intro", "options": [],
         "conditionalLogic": [{"option": "x", "targetBlockId": "ghost", "action": "show"}]},
    ]
    codes = {issue["code"] for issue in form_builder.validate_structure(blocks, broken)}
    assert {"missing_block", "logic_on_non_choice", "missing_target", "unknown_option"} <= codes

    with pytest.raises(FormStructureError) as exc:
        form_builder.ensure_valid(blocks, broken)
    assert exc.value.issues


def test_duplicate_ids_are_reported(structure):
    blocks, questions = structure
    issues = form_builder.validate_structure(blocks + [blocks[0]], questions + [questions[0]])
    codes = [issue["code"] for issue in issues]
    assert "duplicate_block_id" in codes
    assert "duplicate_question_id" in codes


def test_duplicate_structure_rewrites_references(structure):
    blocks, questions = structure
    new_blocks, new_questions = form_builder.duplicate_structure(blocks, questions)

    old_ids = {b["id"] for b in blocks}
    new_ids = [b["id"] for b in new_blocks]
    assert not old_ids & set(new_ids)
    assert [b["title"] for b in new_blocks] == [b["title"] for b in blocks]

    intent = new_questions[0]
    assert intent["blockId"] == new_ids[0]
    assert [r["targetBlockId"] for r in intent["conditionalLogic"]] == [new_ids[1], new_ids[2]]
    assert form_builder.validate_structure(new_blocks, new_questions) == []
    # The source is left untouched
    assert questions[0]["conditionalLogic"][0]["targetBlockId"] == "buyer"


def test_templates_are_valid_and_fresh():
    summaries = {t["key"]: t for t in list_templates()}
    assert set(summaries) == {"real-estate", "event-registration", "customer-feedback"}

    for key in FORM_TEMPLATES:
        first = instantiate_template(key)
        second = instantiate_template(key)
        assert form_builder.validate_structure(first["blocks"], first["questions"]) == []
        assert len(first["blocks"]) == summaries[key]["blocks"] == 4
        assert len(first["questions"]) == summaries[key]["questions"]
        assert {b["id"] for b in first["blocks"]}.isdisjoint(b["id"] for b in second["blocks"])
