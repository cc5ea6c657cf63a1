import pytest

from canaryreview import wizard
from canaryreview.models import model_options, triage_model_options


def answers(*values):
    it = iter(values)
    return lambda _prompt: next(it)


def no_input(_prompt):
    raise AssertionError("input should not be requested")


OPTIONS = [("First", "one"), ("Second", "two"), ("Third", "three")]


def test_choose_by_number():
    assert wizard.choose("Pick", OPTIONS, None, answers("2")) == "two"


def test_choose_empty_answer_uses_default():
    assert wizard.choose("Pick", OPTIONS, "three", answers("")) == "three"


def test_choose_default_falls_back_to_first():
    assert wizard.choose("Pick", OPTIONS, None, answers("")) == "one"


def test_choose_reprompts_on_invalid_answer():
    assert wizard.choose("Pick", OPTIONS, None, answers("9", "x", "three")) == "three"


def test_choose_without_options_raises():
    with pytest.raises(ValueError):
        wizard.choose("Pick", [], None, no_input)


def test_select_setup_mode():
    assert wizard.select_setup_mode(answers("2")) == "github"
    assert wizard.select_setup_mode(answers("")) == "local"


def test_select_provider():
    assert wizard.select_provider(answers("5")) == "claude"
    assert wizard.select_provider(answers("openrouter")) == "openrouter"


def test_select_model_defaults_to_first_option():
    assert wizard.select_model("anthropic", answers("")) == model_options("anthropic")[0]


def test_select_model_by_number():
    assert wizard.select_model("openai", answers("2")) == model_options("openai")[1]


def test_select_model_unknown_provider():
    assert wizard.select_model("unknown", no_input) == ""


def test_select_triage_model():
    assert wizard.select_triage_model("claude", answers("")) == triage_model_options("claude")[0]
    assert wizard.select_triage_model("unknown", no_input) == ""


def test_input_api_key_strips_and_reprompts():
    assert wizard.input_api_key("openai", answers("   ", "  placeholder  ")) == "placeholder"


def test_input_api_key_requires_provider():
    with pytest.raises(ValueError):
        wizard.input_api_key("", no_input)


@pytest.mark.parametrize(
    ("replies", "expected"),
    [
        (("y",), True),
        (("YES",), True),
        (("",), False),
        (("no",), False),
        (("maybe", "y"), True),
    ],
)
def test_confirm_yes_no(replies, expected):
    assert wizard.confirm_yes_no("Continue?", answers(*replies)) is expected