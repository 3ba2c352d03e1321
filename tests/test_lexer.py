import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import cinterp


def toks(src):
    """Return list of (kind, value) pairs, excluding EOF."""
    return [(t.kind, t.value) for t in cinterp.lex(src) if t.kind != "EOF"]


# ---------- Basic tokens ----------

def test_integer_literal():
    assert toks("42") == [("NUMBER", "42")]


def test_identifier():
    assert toks("foo _bar baz9") == [("ID", "foo"), ("ID", "_bar"), ("ID", "baz9")]


def test_empty_source_is_just_eof():
    tokens = cinterp.lex("")
    assert len(tokens) == 1
    assert tokens[0].kind == "EOF"


# ---------- Keywords ----------

def test_keywords():
    for kw in ("int", "void", "if", "else", "while", "for", "return"):
        assert toks(kw) == [("KW", kw)]


def test_break_and_continue_are_reserved():
    assert toks("break continue") == [("KW", "break"), ("KW", "continue")]


def test_keyword_prefix_is_id():
    # "integer" is not the keyword "int"
    assert toks("integer") == [("ID", "integer")]
    assert toks("returned") == [("ID", "returned")]


# ---------- Operators ----------

def test_single_char_ops():
    assert toks("+ - * / %") == [
        ("OP", "+"), ("OP", "-"), ("OP", "*"), ("OP", "/"), ("OP", "%"),
    ]


def test_comparison_ops():
    assert toks("== != < <= > >=") == [
        ("OP", "=="), ("OP", "!="),
        ("OP", "<"), ("OP", "<="),
        ("OP", ">"), ("OP", ">="),
    ]


def test_logical_ops():
    assert toks("&& || !") == [("OP", "&&"), ("OP", "||"), ("OP", "!")]


def test_assign_vs_equal():
    assert toks("a = b == c") == [
        ("ID", "a"), ("OP", "="), ("ID", "b"), ("OP", "=="), ("ID", "c"),
    ]


def test_punctuation():
    assert toks("( ) { } [ ] ; , &") == [
        ("PUNCT", "("), ("PUNCT", ")"),
        ("PUNCT", "{"), ("PUNCT", "}"),
        ("PUNCT", "["), ("PUNCT", "]"),
        ("PUNCT", ";"), ("PUNCT", ","), ("PUNCT", "&"),
    ]


def test_ampersand_pair_is_logical_and():
    assert toks("a&&&b") == [("ID", "a"), ("OP", "&&"), ("PUNCT", "&"), ("ID", "b")]


# ---------- Comments & whitespace ----------

def test_line_comment():
    assert toks("a // comment\nb") == [("ID", "a"), ("ID", "b")]


def test_block_comment():
    assert toks("a /* multi\nline */ b") == [("ID", "a"), ("ID", "b")]


def test_unterminated_block_comment():
    with pytest.raises(cinterp.LexError) as exc:
        cinterp.lex("int a; /* never closed")
    assert "unterminated comment" in str(exc.value)
    assert exc.value.loc == cinterp.Loc(1, 8)


# ---------- Positions ----------

def test_positions_are_one_based_line_and_column():
    tokens = cinterp.lex("int main() {\n  return 0;\n}")
    ret = tokens[5]
    assert (ret.kind, ret.value) == ("KW", "return")
    assert (ret.line, ret.col) == (2, 3)


def test_positions_after_multiline_comment():
    tokens = cinterp.lex("/* one\ntwo */ x")
    assert (tokens[0].line, tokens[0].col) == (2, 8)


def test_eof_position():
    tokens = cinterp.lex("a\nbc")
    assert tokens[-1].kind == "EOF"
    assert (tokens[-1].line, tokens[-1].col) == (2, 3)


# ---------- Errors ----------

def test_unexpected_character():
    with pytest.raises(cinterp.LexError) as exc:
        cinterp.lex("int a;\n  a = 1 @ 2;")
    assert exc.value.loc == cinterp.Loc(2, 9)
    assert exc.value.kind == "LexError"


def test_single_pipe_is_rejected():
    with pytest.raises(cinterp.LexError):
        cinterp.lex("a | b")


def test_literal_too_large():
    assert toks("2147483647") == [("NUMBER", "2147483647")]
    with pytest.raises(cinterp.LexError):
        cinterp.lex("2147483648")


# ---------- Stream ----------

def test_token_stream_is_restartable():
    stream = cinterp.tokenize("int x;")
    first = list(stream)
    second = list(stream)
    assert first == second
    assert [t.kind for t in first] == ["KW", "ID", "PUNCT", "EOF"]


def test_token_stream_is_lazy():
    stream = iter(cinterp.tokenize("a b $"))
    assert next(stream).value == "a"
    assert next(stream).value == "b"
    with pytest.raises(cinterp.LexError):
        next(stream)
