from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import ParseError, parse_rd, run_output_case, run_runtime_case
from quill.types import QuillAssertionError, QuillNameError, QuillTypeError

SCENARIOS = [
    pytest.param("if true { 1 } else { 2 }", ("int", 1), None, id="if-true"),
    pytest.param("if false { 1 } else { 2 }", ("int", 2), None, id="if-false"),
    pytest.param("if false { 1 }", ("nothing", None), None, id="if-no-branch-taken"),
    pytest.param(
        dedent(
            """\
            let x = 7
            if x < 5 {
                "small"
            } else if x < 10 {
                "medium"
            } else {
                "large"
            }
        """
        ),
        ("string", "medium"),
        None,
        id="else-if-chain",
    ),
    pytest.param(
        "let x = 50\nif x < 5 { \"small\" } else if x < 10 { \"medium\" } else { \"large\" }",
        ("string", "large"),
        None,
        id="else-fallback",
    ),
    pytest.param(
        dedent(
            """\
            let hits = 0
            def probe(v) {
                hits = hits + 1
                return v
            }
            if probe(true) { 1 } else if probe(true) { 2 }
            hits
        """
        ),
        ("int", 1),
        None,
        id="first-true-branch-stops",
    ),
    pytest.param('if "" { 1 } else { 2 }', ("int", 2), None, id="empty-string-falsy"),
    pytest.param('if "a" { 1 } else { 2 }', ("int", 1), None, id="string-truthy"),
    pytest.param("if 0 { 1 } else { 2 }", ("int", 2), None, id="zero-falsy"),
    pytest.param("if 0.0 { 1 } else { 2 }", ("int", 2), None, id="zero-float-falsy"),
    pytest.param("if nothing { 1 } else { 2 }", ("int", 2), None, id="nothing-falsy"),
    pytest.param("if 0..0 { 1 } else { 2 }", ("int", 2), None, id="empty-range-falsy"),
    pytest.param("if 0..1 { 1 } else { 2 }", ("int", 1), None, id="range-truthy"),
    pytest.param("if print { 1 } else { 2 }", ("int", 1), None, id="function-truthy"),
    pytest.param(
        dedent(
            """\
            let i = 0
            let total = 0
            while i < 10 {
                i = i + 1
                if i == 3 { continue }
                total = total + i
            }
            total
        """
        ),
        ("int", 52),
        None,
        id="while-continue",
    ),
    pytest.param(
        dedent(
            """\
            let i = 0
            while true {
                if i >= 4 { break }
                i = i + 1
            }
            i
        """
        ),
        ("int", 4),
        None,
        id="while-break",
    ),
    pytest.param("while false { 1 }", ("nothing", None), None, id="while-value-is-nothing"),
    pytest.param(
        "let n = 0\nwhile n < 3 { n = n + 1 }\nn",
        ("int", 3),
        None,
        id="while-counts",
    ),
    pytest.param("let x = 1", ("nothing", None), None, id="let-value-is-nothing"),
    pytest.param("let x = 1\nx = 2", ("nothing", None), None, id="assign-value-is-nothing"),
    pytest.param("", ("nothing", None), None, id="empty-program"),
    pytest.param("assert 1 + 1 == 2\n\"ok\"", ("string", "ok"), None, id="assert-pass"),
    pytest.param("assert 1 == 2", None, QuillAssertionError, id="assert-fail"),
    pytest.param('assert false, "custom"', None, QuillAssertionError, id="assert-message"),
    pytest.param("assert nothing", None, QuillAssertionError, id="assert-nothing"),
    pytest.param("if missing { 1 }", None, QuillNameError, id="cond-name-error"),
    pytest.param("while 1 < \"a\" { 1 }", None, QuillTypeError, id="cond-type-error"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_control_flow(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_return_from_inside_loop() -> None:
    source = dedent(
        """\
        def find(text, ch) {
            let i = 0
            for c in text {
                if c == ch { return i }
                i = i + 1
            }
            return -1
        }
        print(find("quill", "i"))
        print(find("quill", "z"))
        """
    )

    run_output_case(source, ["2", "-1"])


def test_if_is_not_an_expression() -> None:
    with pytest.raises(ParseError):
        parse_rd('let label = if 1 < 2 { "yes" } else { "no" }')


def test_break_from_nested_for_leaves_inner_only() -> None:
    source = dedent(
        """\
        for i in 0..3 {
            for j in 0..3 {
                if j == 1 { break }
                print(str(i) + str(j))
            }
        }
        """
    )

    run_output_case(source, ["00", "10", "20"])
