from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import run_runtime_case
from quill.types import QuillArityError, QuillIndexError, QuillTypeError, QuillZeroStepError

SCENARIOS = [
    pytest.param('"ab" + "cd"', ("string", "abcd"), None, id="concat"),
    pytest.param('"ab" * 3', ("string", "ababab"), None, id="repeat"),
    pytest.param('3 * "ab"', ("string", "ababab"), None, id="repeat-commutative"),
    pytest.param('"ab" * 0', ("string", ""), None, id="repeat-zero"),
    pytest.param('"ab" * -2', ("string", ""), None, id="repeat-negative"),
    pytest.param('"ab" * 2.0', None, QuillTypeError, id="repeat-float"),
    pytest.param('"ab" + 1', None, QuillTypeError, id="concat-int"),
    pytest.param('"ab" - "b"', None, QuillTypeError, id="string-minus"),
    pytest.param('"abc"[0]', ("string", "a"), None, id="index-first"),
    pytest.param('"abc"[-1]', ("string", "c"), None, id="index-negative"),
    pytest.param('"abc"[3]', None, QuillIndexError, id="index-past-end"),
    pytest.param('"abc"[-4]', None, QuillIndexError, id="index-before-start"),
    pytest.param('"abc"[1.0]', None, QuillTypeError, id="index-float"),
    pytest.param('"hello"[::]', ("string", "hello"), None, id="full-slice-identity"),
    pytest.param('"hello"[:]', ("string", "hello"), None, id="colon-slice-identity"),
    pytest.param('"hello"[::-1]', ("string", "olleh"), None, id="reverse"),
    pytest.param('"hello"[1:3]', ("string", "el"), None, id="slice-middle"),
    pytest.param('"hello"[-3:]', ("string", "llo"), None, id="slice-negative-start"),
    pytest.param('"hello"[:-1]', ("string", "hell"), None, id="slice-negative-stop"),
    pytest.param('"hello"[10:]', ("string", ""), None, id="slice-start-clamped"),
    pytest.param('"hello"[:100]', ("string", "hello"), None, id="slice-stop-clamped"),
    pytest.param('"hello"[4:1:-1]', ("string", "oll"), None, id="slice-negative-step"),
    pytest.param('"hello"[-1:-4:-2]', ("string", "ol"), None, id="slice-all-negative"),
    pytest.param('"addition"[::2][3:]', ("string", "o"), None, id="chained-slice-plain"),
    pytest.param(
        '"      a d d i t i o n "[::2][3:]',
        ("string", "addition"),
        None,
        id="chained-slice-golden",
    ),
    pytest.param('"hello"[::0]', None, QuillZeroStepError, id="slice-zero-step"),
    pytest.param('"hello"["a":]', None, QuillTypeError, id="slice-string-bound"),
    pytest.param('"hello"[:2.5]', None, QuillTypeError, id="slice-float-bound"),
    pytest.param("let n = 5\nn[0]", None, QuillTypeError, id="index-int"),
    pytest.param("let n = 5\nn[:1]", None, QuillTypeError, id="slice-int"),
    pytest.param('"a" < "b"', ("bool", True), None, id="lexicographic-lt"),
    pytest.param('"abc" >= "abd"', ("bool", False), None, id="lexicographic-gte"),
    pytest.param('"a" < 1', None, QuillTypeError, id="compare-string-int"),
    pytest.param('"ab" == "ab"', ("bool", True), None, id="equal"),
    pytest.param('"1" == 1', ("bool", False), None, id="no-coercion"),
    pytest.param('len("hello")', ("int", 5), None, id="len"),
    pytest.param('len("")', ("int", 0), None, id="len-empty"),
    pytest.param("len(5)", None, QuillTypeError, id="len-int"),
    pytest.param('len("a", "b")', None, QuillArityError, id="len-arity"),
    pytest.param("str(12)", ("string", "12"), None, id="str-int"),
    pytest.param("str(2.5)", ("string", "2.5"), None, id="str-float"),
    pytest.param("str(14 / 2)", ("string", "7.0"), None, id="str-whole-float"),
    pytest.param("str(nothing)", ("string", "nothing"), None, id="str-nothing"),
    pytest.param("str(1 < 2)", ("string", "true"), None, id="str-bool"),
    pytest.param('str("x")', ("string", "x"), None, id="str-string"),
    pytest.param('"tab\\there"', ("string", "tab\there"), None, id="escape-tab"),
    pytest.param(
        dedent(
            """\
            let out = ""
            for c in "abc" {
                out = c + out
            }
            out
        """
        ),
        ("string", "cba"),
        None,
        id="iterate-characters",
    ),
    pytest.param(
        dedent(
            """\
            let s = "quill"
            let i = 0
            let out = ""
            while i < len(s) {
                out = out + s[i] * 2
                i = i + 1
            }
            out
        """
        ),
        ("string", "qquuiillll"),
        None,
        id="index-in-loop",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_strings(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)
