import pytest

import ottomaton
from ottomaton.errors import UnknownReferenceError
from ottomaton.state import deref, deref_value, is_reference, public_state, strip_transient


STATE = {"FULL_NAME": "Ada Lovelace", "COUNT": 3, "X": "ex"}


def test_reference_resolves_to_state_value_of_any_type():
    assert deref(STATE, ["FULL_NAME", "COUNT"]) == ["Ada Lovelace", 3]


def test_quoted_literal_is_unwrapped_verbatim():
    assert deref_value(STATE, '"literal text"') == "literal text"
    assert deref_value(STATE, '"FULL_NAME"') == "FULL_NAME"
    assert deref_value(STATE, '""') == ""


def test_other_arguments_pass_through():
    assert deref(STATE, ["plainword", "Full_Name", "_X", "X_", None, 7]) == ["plainword", "Full_Name", "_X", "X_", None, 7]


def test_single_letter_identifier_is_a_reference():
    assert deref_value(STATE, "X") == "ex"


def test_unknown_reference_names_identifier():
    with pytest.raises(UnknownReferenceError) as excinfo:
        deref(STATE, ["plain", "UNKNOWN_VAR"])
    assert excinfo.value.name == "UNKNOWN_VAR"
    assert "Unknown Reference: UNKNOWN_VAR" in str(excinfo.value)


@pytest.mark.parametrize(
    "value, expected",
    [("A", True), ("ABC_DEF", True), ("A1_B2", True), ("A__B", False), ("1A", False), ("a", False), ("A B", False)],
)
def test_reference_pattern(value, expected):
    assert is_reference(value) is expected


def test_strip_transient_keeps_caller_keys():
    state = {"ottomaton": object(), "LINE": "x", "keep": 1}
    assert strip_transient(state) is state
    assert state == {"keep": 1}


def test_public_state_excludes_given_keys():
    state = {"ottomaton": object(), "output": "json", "X": "10"}
    assert public_state(state, exclude=["output"]) == {"X": "10"}


def test_custom_action_dereferences_with_public_helper():
    def copy(state, source, target):
        state[target] = ottomaton.deref_value(state, source)

    otto = ottomaton.Ottomaton().register('copy "SOURCE" into "TARGET"', copy, deref=False)
    result = otto.run_sync('copy FULL_NAME into OTHER\ncopy "literal" into THIRD\n', {"FULL_NAME": "Ada Lovelace"})
    assert result["OTHER"] == "Ada Lovelace"
    assert result["THIRD"] == "literal"
