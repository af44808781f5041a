from __future__ import annotations

from io import StringIO

import pytest

from liquid_tags.exceptions import CompileError
from liquid_tags.exceptions import RenderError
from liquid_tags.exceptions import UndefinedVariableError
from liquid_tags.rendering.context import RenderContext
from liquid_tags.tags.control_flow import BranchStep
from liquid_tags.tags.control_flow import if_tag_compiler
from liquid_tags.types import ConditionalOn
from liquid_tags.types import TagNode
from liquid_tags.types import TextNode
from liquid_tags.types import Unconditional

from ._helpers import CountingExpression
from ._helpers import TrackingDict

TRUTHY_AND_FALSY = [None, False, True, 0, 1, "", "x", [], [0], {}, 0.0]


@pytest.mark.parametrize(
    "template,expected",
    [
        ("{% if false %}A{% elsif true %}B{% else %}C{% endif %}", "B"),
        ("{% if true %}A{% elsif true %}B{% else %}C{% endif %}", "A"),
        ("{% if false %}A{% elsif false %}B{% else %}C{% endif %}", "C"),
        ("{% if false %}A{% elsif nil %}B{% endif %}", ""),
        ("{% if 0 %}zero{% endif %}", "zero"),
        ("{% if '' %}empty string{% endif %}", "empty string"),
        ("{% if 1 == 1.0 %}eq{% endif %}", "eq"),
        ("{% unless true %}A{% else %}B{% endunless %}", "B"),
        ("{% unless false %}A{% else %}B{% endunless %}", "A"),
        ("{% unless true %}A{% elsif true %}B{% endunless %}", "B"),
        ("{% if a %}{% if b %}ab{% else %}a{% endif %}{% endif %}", "a"),
    ],
)
def test_if_scenarios(render, template: str, expected: str) -> None:
    assert render(template, {"a": True, "b": False}) == expected


@pytest.mark.parametrize("value", TRUTHY_AND_FALSY)
def test_truthiness(render, value) -> None:
    expected = "" if value is None or value is False else "yes"
    assert render("{% if v %}yes{% endif %}", {"v": value}) == expected


@pytest.mark.parametrize("value", TRUTHY_AND_FALSY)
def test_unless_matches_if_not(render, value) -> None:
    unless = render("{% unless v %}A{% else %}B{% endunless %}", {"v": value})
    if_not = render("{% if not v %}A{% else %}B{% endif %}", {"v": value})
    assert unless == if_not


def test_short_circuit_skips_later_tests(render) -> None:
    later = TrackingDict(flag=True)
    out = render(
        "{% if first %}1{% elsif later.flag %}2{% else %}3{% endif %}",
        {"first": True, "later": later},
    )
    assert out == "1"
    assert later.reads == []

    out = render(
        "{% if first %}1{% elsif later.flag %}2{% else %}3{% endif %}",
        {"first": False, "later": later},
    )
    assert out == "2"
    assert later.reads == ["flag"]


def _context(registry) -> RenderContext:
    return RenderContext({}, registry=registry)


def test_branch_step_evaluates_lazily(registry) -> None:
    tests = [CountingExpression(False), CountingExpression(True), CountingExpression(True)]
    nodes = [TagNode(name="if", body=[TextNode(str(i))]) for i in range(3)]
    step = BranchStep(tuple(ConditionalOn(t, n) for t, n in zip(tests, nodes)))

    out = StringIO()
    step.render(out, _context(registry))

    assert out.getvalue() == "1"
    assert [t.calls for t in tests] == [1, 1, 0]


def test_branch_step_no_match_renders_nothing(registry) -> None:
    step = BranchStep((ConditionalOn(CountingExpression(None), TagNode(name="if")),))
    out = StringIO()
    step.render(out, _context(registry))
    assert out.getvalue() == ""


def test_compile_builds_closed_branch_list() -> None:
    node = TagNode(
        name="if",
        parameters="a",
        branches=[
            TagNode(name="elsif", parameters="b"),
            TagNode(name="else"),
            TagNode(name="otherwise"),
        ],
    )
    step = if_tag_compiler(True)(node)
    kinds = [type(b) for b in step.branches]
    assert kinds == [ConditionalOn, ConditionalOn, Unconditional, Unconditional]
    assert step.branches[0].node is node
    assert step.branches[3].node is node.branches[2]


def test_unless_negates_only_primary_test(registry) -> None:
    node = TagNode(
        name="unless",
        parameters="true",
        branches=[TagNode(name="elsif", parameters="true", body=[TextNode("B")])],
    )
    out = StringIO()
    if_tag_compiler(False)(node).render(out, _context(registry))
    assert out.getvalue() == "B"


def test_malformed_primary_expression() -> None:
    with pytest.raises(CompileError, match="'a =='"):
        if_tag_compiler(True)(TagNode(name="if", parameters="a =="))


def test_malformed_elsif_expression() -> None:
    node = TagNode(
        name="if", parameters="a", branches=[TagNode(name="elsif", parameters="and", line=7)]
    )
    with pytest.raises(CompileError) as exc_info:
        if_tag_compiler(True)(node)
    assert exc_info.value.line == 7


def test_evaluation_error_aborts_without_output(render) -> None:
    with pytest.raises(RenderError, match="Cannot compare"):
        render("before{% if false %}A{% elsif a > 1 %}B{% endif %}", {"a": "x"})


def test_strict_undefined_variable(render) -> None:
    assert render("{% if missing %}A{% else %}B{% endif %}") == "B"
    with pytest.raises(UndefinedVariableError) as exc_info:
        render("\n{% if missing %}A{% endif %}", strict_variables=True)
    assert exc_info.value.name == "missing"
    assert exc_info.value.line == 2


def test_failing_body_writes_nothing(registry) -> None:
    node = TagNode(
        name="if",
        parameters="true",
        body=[TextNode("partial"), TagNode(name="for")],
    )
    step = if_tag_compiler(True)(node)
    out = StringIO()
    with pytest.raises(RenderError, match="no render step"):
        step.render(out, _context(registry))
    assert out.getvalue() == ""


@pytest.mark.parametrize(
    "condition", ["score > 10", "score < 10", "score >= 0", "10 <= score", "nil < 1"]
)
def test_ordering_against_nil_is_false(render, condition: str) -> None:
    source = f"{{% if {condition} %}}big{{% else %}}small{{% endif %}}"
    assert render(source) == "small"
    assert render(source.replace("if", "unless", 1).replace("endif", "endunless")) == "big"
