import pytest

from adparlay.services.form_runtime import (
    FormNavigator,
    NavigationError,
    initially_hidden_blocks,
    is_answered,
    match_rule,
)

from conftest import branching_form_payload


@pytest.fixture
def structure():
    payload = branching_form_payload()
    return payload["blocks"], payload["questions"]


def _block(block_id, title=None):
    return {"id": block_id, "title": title or block_id}


def _question(question_id, block_id, qtype="text", required=False, options=None, logic=None):
    return {
        "id": question_id,
        "type": qtype,
        "label": question_id,
        "required": required,
        "blockId": block_id,
        "options": options or [],
        "conditionalLogic": logic or [],
    }


def test_is_answered():
    assert is_answered({"type": "text"}, "hello")
    assert not is_answered({"type": "text"}, "   ")
    assert not is_answered({"type": "text"}, None)
    assert is_answered({"type": "number"}, 0)
    assert not is_answered({"type": "checkbox"}, [])
    assert not is_answered({"type": "checkbox"}, "a")
    assert is_answered({"type": "checkbox"}, ["a"])


def test_match_rule_picks_first_selected_option():
    question = _question("q", "b", "checkbox", options=["A", "B"], logic=[
        {"option": "A", "targetBlockId": "x", "action": "jump"},
        {"option": "B", "targetBlockId": "y", "action": "jump"},
    ])
    assert match_rule(question, ["B", "A"])["targetBlockId"] == "x"
    assert match_rule(question, ["B"])["targetBlockId"] == "y"
    assert match_rule(question, []) is None
    assert match_rule(question, "C") is None


def test_show_targets_start_hidden(structure):
    blocks, questions = structure
    assert initially_hidden_blocks(questions) == {"buyer", "seller"}


def test_start_lands_on_first_question(structure):
    navigator = FormNavigator(*structure)
    assert navigator.current_block()["id"] == "intro"
    assert navigator.current_question()["id"] == "q-intent"
    assert not navigator.completed


def test_show_rule_reveals_only_the_chosen_branch(structure):
    navigator = FormNavigator(*structure)
    navigator.answer("q-intent", "Buy")
    assert navigator.current_question()["id"] == "q-budget"

    navigator.answer("q-budget", "500k")
    # The seller block is still hidden, so the walk goes straight to contact
    assert navigator.current_block()["id"] == "contact"
    assert navigator.current_question()["id"] == "q-name"

    navigator.answer("q-name", "Jane Doe")
    navigator.answer("q-email", "jane@example.com")
    assert navigator.completed
    assert navigator.current_question() is None


def test_jump_rule_skips_blocks():
    blocks = [_block("b1"), _block("b2"), _block("b3")]
    questions = [
        _question("q1", "b1", "radio", options=["Skip", "Stay"], logic=[
            {"option": "Skip", "targetBlockId": "b3", "action": "jump"},
        ]),
        _question("q2", "b2"),
        _question("q3", "b3"),
    ]
    navigator = FormNavigator(blocks, questions)
    navigator.answer("q1", "Skip")
    assert navigator.current_question()["id"] == "q3"

    navigator = FormNavigator(blocks, questions)
    navigator.answer("q1", "Stay")
    assert navigator.current_question()["id"] == "q2"


def test_hide_rule_removes_block_from_linear_path():
    blocks = [_block("b1"), _block("b2"), _block("b3")]
    questions = [
        _question("q1", "b1", "select", options=["No", "Yes"], logic=[
            {"option": "No", "targetBlockId": "b2", "action": "hide"},
        ]),
        _question("q2", "b2"),
        _question("q3", "b3"),
    ]
    navigator = FormNavigator(blocks, questions)
    navigator.answer("q1", "No")
    assert navigator.current_question()["id"] == "q3"
    assert "b2" in navigator.hidden_blocks


def test_rule_with_unknown_target_falls_back_to_linear_order():
    blocks = [_block("b1"), _block("b2")]
    questions = [
        _question("q1", "b1", "radio", options=["A"], logic=[
            {"option": "A", "targetBlockId": "gone", "action": "jump"},
        ]),
        _question("q2", "b2"),
    ]
    navigator = FormNavigator(blocks, questions)
    navigator.answer("q1", "A")
    assert navigator.current_question()["id"] == "q2"


def test_empty_and_hidden_blocks_are_skipped():
    blocks = [_block("empty"), _block("b1"), _block("b2")]
    questions = [_question("q1", "b1"), _question("q2", "b2")]
    navigator = FormNavigator(blocks, questions)
    assert navigator.current_block()["id"] == "b1"


def test_form_without_questions_is_immediately_complete():
    navigator = FormNavigator([_block("b1")], [])
    assert navigator.completed
    assert navigator.block_complete()


def test_answering_out_of_turn_is_rejected(structure):
    navigator = FormNavigator(*structure)
    with pytest.raises(NavigationError):
        navigator.answer("q-email", "jane@example.com")


def test_answering_after_completion_is_rejected():
    navigator = FormNavigator([_block("b1")], [_question("q1", "b1")])
    navigator.answer("q1", "done")
    assert navigator.completed
    with pytest.raises(NavigationError):
        navigator.answer("q1", "again")


def test_previous_returns_to_the_last_answered_question(structure):
    navigator = FormNavigator(*structure)
    navigator.previous()
    assert navigator.current_question()["id"] == "q-intent"

    navigator.answer("q-intent", "Sell")
    assert navigator.current_question()["id"] == "q-address"
    navigator.previous()
    assert navigator.current_question()["id"] == "q-intent"
    assert navigator.answers["q-intent"] == "Sell"


def test_next_skips_without_answering(structure):
    navigator = FormNavigator(*structure)
    navigator.next()
    assert navigator.current_block()["id"] == "contact"
    assert "q-intent" not in navigator.answers


def test_block_completion_tracks_required_questions(structure):
    navigator = FormNavigator(*structure)
    navigator.answer("q-intent", "Buy")
    navigator.answer("q-budget", "1m")
    assert not navigator.block_complete()
    assert navigator.missing_in_block() == ["q-name", "q-email"]

    navigator.answer("q-name", "Jane Doe")
    assert navigator.missing_in_block() == ["q-email"]


def test_state_round_trip_resumes_the_walk(structure):
    navigator = FormNavigator(*structure)
    navigator.answer("q-intent", "Buy")
    state = navigator.to_state()
    assert state["hidden_blocks"] == ["seller"]

    resumed = FormNavigator(*structure, state=state)
    assert resumed.current_question()["id"] == "q-budget"
    resumed.answer("q-budget", "250k")
    assert resumed.current_question()["id"] == "q-name"
    resumed.previous()
    assert resumed.current_question()["id"] == "q-budget"


def test_replay_only_requires_questions_on_the_path(structure):
    answers = {"q-intent": "Buy", "q-budget": "500k", "q-name": "Jane Doe", "q-email": "jane@example.com"}
    navigator = FormNavigator.replay(*structure, answers)
    assert navigator.completed
    assert navigator.visited == ["q-intent", "q-budget", "q-name", "q-email"]
    assert navigator.missing_required() == []


def test_replay_reports_missing_answers_on_the_path(structure):
    navigator = FormNavigator.replay(*structure, {"q-intent": "Sell", "q-name": "Jane Doe"})
    assert navigator.missing_required() == ["q-address", "q-email"]


def test_replay_stops_on_a_loop():
    blocks = [_block("b1"), _block("b2")]
    questions = [
        _question("q1", "b1", "radio", options=["x"]),
        _question("q2", "b2", "radio", required=True, options=["Again"], logic=[
            {"option": "Again", "targetBlockId": "b1", "action": "jump"},
        ]),
    ]
    navigator = FormNavigator.replay(blocks, questions, {"q1": "x", "q2": "Again"})
    assert not navigator.completed
    assert navigator.missing_required() == []


def test_required_checkbox_needs_a_selection():
    blocks = [_block("b1")]
    questions = [_question("q1", "b1", "checkbox", required=True, options=["A", "B"])]
    assert FormNavigator.replay(blocks, questions, {"q1": []}).missing_required() == ["q1"]
    assert FormNavigator.replay(blocks, questions, {"q1": ["A"]}).missing_required() == []
