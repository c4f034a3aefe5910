import logging

from ottomaton import Ottomaton
from ottomaton.config import OttomatonOptions, coerce_options, get_log_level, load_options


def test_defaults():
    options = load_options(env={})
    assert options.common is True


def test_common_from_environment():
    assert load_options(env={"OTTOMATON_COMMON": "false"}).common is False
    assert load_options(env={"OTTOMATON_COMMON": "yes"}).common is True


def test_env_variable_disables_common_actions(monkeypatch):
    monkeypatch.setenv("OTTOMATON_COMMON", "0")
    assert Ottomaton().registrations == []


def test_overrides_win_over_environment():
    assert load_options(env={"OTTOMATON_COMMON": "false"}, common=True).common is True


def test_extra_options_are_kept_as_attributes():
    options = coerce_options({"base_url": "http://localhost"})
    assert options.base_url == "http://localhost"
    assert options.common is True


def test_coerce_existing_options_with_overrides():
    original = OttomatonOptions(common=True)
    assert coerce_options(original) is original
    assert coerce_options(original, common=False).common is False


def test_log_level_from_environment():
    assert get_log_level({}) == logging.WARNING
    assert get_log_level({"OTTOMATON_LOG_LEVEL": "debug"}) == logging.DEBUG
    assert get_log_level({"OTTOMATON_LOG_LEVEL": "nonsense"}) == logging.WARNING
