import json

import pytest
from jinja2 import UndefinedError

from manual_rag.common import Candidate
from manual_rag.generation.prompt_builder import (
    DEFAULT_PROMPT_NAME,
    PromptBuilder,
    PromptTemplate,
    default_prompt_builder,
)


def _docs():
    return [
        Candidate(score=0.9, page=12, title="Dishwasher X1", text="Remove the lower filter."),
        Candidate(score=0.5, page=None, title="Dishwasher X1", text="Rinse under warm water."),
    ]


def test_default_builder_registers_bundled_prompt():
    builder = default_prompt_builder()
    assert builder.has_prompt(DEFAULT_PROMPT_NAME)
    assert builder.list_prompts() == [DEFAULT_PROMPT_NAME]


def test_bundled_prompt_renders_excerpts_and_rules():
    """
    The system message carries the grounding rules and the not-found
    sentence; the user message lists every excerpt with title and page,
    using "unknown" for a missing page.
    """
    messages = default_prompt_builder().build_messages(
        DEFAULT_PROMPT_NAME,
        question="How do I clean the filter?",
        docs=_docs(),
        not_found_message="I can't find this in the manual.",
    )

    assert "Use ONLY the excerpts" in messages.system
    assert "I can't find this in the manual." in messages.system
    assert "(Title, page X)" in messages.system

    assert messages.user.startswith("Question: How do I clean the filter?")
    assert "### Excerpt 1\nManual: Dishwasher X1 | Page: 12\n---\nRemove the lower filter." in messages.user
    assert "### Excerpt 2\nManual: Dishwasher X1 | Page: unknown\n---\nRinse under warm water." in messages.user
    assert "(Title, page unknown)" in messages.user
    assert "{%" not in messages.user


def test_bundled_prompt_with_no_excerpts_still_renders():
    messages = default_prompt_builder().build_messages(
        DEFAULT_PROMPT_NAME, question="Anything?", docs=[], not_found_message="Not found."
    )
    assert "### Excerpt" not in messages.user


def test_missing_variable_raises():
    with pytest.raises(UndefinedError):
        default_prompt_builder().build(DEFAULT_PROMPT_NAME, question="q", docs=[])


def test_render_joins_system_and_user():
    template = PromptTemplate(name="t", system="Be brief.", user="Q: {{ question }}")
    assert template.render(question="why?") == "Be brief.\n\nQ: why?"
    assert PromptTemplate(name="u", user="only {{ x }}").render_messages(x=1).system is None


def test_register_from_dict_accepts_line_lists():
    builder = PromptBuilder()
    name = builder.register_from_dict({"name": "lines", "user": ["a {{ x }}", "b"]})

    assert name == "lines"
    assert builder.build("lines", x=1) == "a 1\nb"


@pytest.mark.parametrize(
    "data, error",
    [
        ({"user": "x"}, KeyError),
        ({"name": 3, "user": "x"}, TypeError),
        ({"name": "  ", "user": "x"}, ValueError),
        ({"name": "n", "user": {"bad": 1}}, TypeError),
    ],
)
def test_register_from_dict_validates(data, error):
    with pytest.raises(error):
        PromptBuilder().register_from_dict(data)


def test_register_from_file_resolves_relative_to_base_dir(tmp_path):
    prompt_file = tmp_path / "custom.json"
    prompt_file.write_text(json.dumps([{"name": "custom", "user": "Hi {{ who }}"}]), encoding="utf-8")

    builder = PromptBuilder()
    assert builder.register_from_source("file:custom.json", base_dir=tmp_path) == ["custom"]
    assert builder.build("custom", who="tech") == "Hi tech"


def test_register_from_file_rejects_missing_and_non_json(tmp_path):
    builder = PromptBuilder()
    with pytest.raises(FileNotFoundError):
        builder.register_from_file(tmp_path / "nope.json")

    yaml_file = tmp_path / "prompt.yaml"
    yaml_file.write_text("name: x", encoding="utf-8")
    with pytest.raises(ValueError):
        builder.register_from_file(yaml_file)


def test_unknown_template_lists_available():
    with pytest.raises(KeyError, match="manual_assistant"):
        default_prompt_builder().get_template("missing")


def test_overwriting_template_warns():
    builder = PromptBuilder()
    builder.register_from_dict({"name": "dup", "user": "one"})
    with pytest.warns(UserWarning):
        builder.register_from_dict({"name": "dup", "user": "two"})
    assert builder.build("dup") == "two"
