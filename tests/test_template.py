from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from liquid_tags import parse_template
from liquid_tags.config import RenderConfig
from liquid_tags.exceptions import CompileError
from liquid_tags.exceptions import RenderError
from liquid_tags.tags import default_registry

SCENARIOS = [
    ("{% if false %}A{% elsif true %}B{% else %}C{% endif %}", "B"),
    ("{% unless true %}A{% else %}B{% endunless %}", "B"),
    ("{% case 2 %}{% when 1 %}one{% when 2 %}two{% when 3 %}three{% endcase %}", "two"),
    ("{% capture greeting %}hi{% endcapture %}{{ greeting }}", "hi"),
]


@pytest.mark.parametrize("template,expected", SCENARIOS)
@pytest.mark.parametrize("force_fallback_lexer", [False, True])
def test_scenarios(template: str, expected: str, force_fallback_lexer: bool) -> None:
    config = RenderConfig(force_fallback_lexer=force_fallback_lexer)
    assert parse_template(template, config=config).render() == expected


def test_default_registry_used() -> None:
    assert parse_template("x").registry is default_registry()


def test_variables_and_kwargs() -> None:
    template = parse_template("{{ a }}-{{ b }}")
    assert template.render({"a": 1}, b=2) == "1-2"
    assert template.render(a="x") == "x-"


def test_raw_emits_body_verbatim() -> None:
    template = parse_template("{% raw %}{{ a }}{% if %}{% endraw %}!")
    assert template.render(a="nope") == "{{ a }}{% if %}!"


def test_comment_emits_nothing() -> None:
    template = parse_template("a{% comment %}{% if broken {{ %}{% endcomment %}b")
    assert template.render() == "ab"


def test_render_is_repeatable_and_isolated() -> None:
    template = parse_template(
        "{% if flag %}{% capture x %}set{% endcapture %}{% endif %}[{{ x }}]"
    )
    assert template.render(flag=True) == "[set]"
    assert template.render(flag=False) == "[]"


def test_concurrent_renders() -> None:
    template = parse_template(
        "{% case n %}{% when 1 %}one{% when 2 %}two{% endcase %}"
        "{% capture c %}{{ n }}{% endcapture %}{{ c }}"
    )
    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(lambda n: template.render(n=n), [1, 2, 1, 2, 3] * 10))
    assert results == ["one1", "two2", "one1", "two2", "3"] * 10


def test_compile_error_message_includes_line() -> None:
    with pytest.raises(CompileError) as exc_info:
        parse_template("ok\n{% if %}{% endif %}")
    assert str(exc_info.value).startswith("line 2: Syntax error in expression ''")


def test_render_error_carries_line() -> None:
    template = parse_template("a\n\n{% if x < 1 %}{% endif %}")
    with pytest.raises(RenderError) as exc_info:
        template.render(x="s")
    assert exc_info.value.line == 3


def test_output_error_carries_line() -> None:
    template = parse_template("\n{{ a > 1 }}")
    with pytest.raises(RenderError) as exc_info:
        template.render(a=None)
    assert exc_info.value.line == 2


def test_strict_variables_in_output() -> None:
    template = parse_template("{{ nope }}", config=RenderConfig(strict_variables=True))
    with pytest.raises(RenderError, match="Undefined variable 'nope'"):
        template.render()


def test_nested_control_flow() -> None:
    template = parse_template(
        "{% case role %}"
        "{% when 'admin' %}{% if active %}A+{% else %}A-{% endif %}"
        "{% when 'user' %}{% unless active %}U-{% endunless %}"
        "{% endcase %}"
    )
    assert template.render(role="admin", active=True) == "A+"
    assert template.render(role="admin", active=False) == "A-"
    assert template.render(role="user", active=False) == "U-"
    assert template.render(role="user", active=True) == ""
    assert template.render(role="guest") == ""


def test_unhashable_keys_render_as_missing() -> None:
    variables = {"h": {"a": 1}, "k": [1]}
    assert parse_template("[{{ h[k] }}]").render(variables) == "[]"
    assert parse_template("{% if h contains k %}y{% else %}n{% endif %}").render(variables) == "n"


@pytest.mark.parametrize("force_fallback_lexer", [False, True])
def test_multiline_markup_renders_literally(force_fallback_lexer: bool) -> None:
    config = RenderConfig(force_fallback_lexer=force_fallback_lexer)
    assert parse_template("{{ a\n }}", config=config).render(a="x") == "{{ a\n }}"
