"""Tests for the quote-aware tokenizer."""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from ced.engine.tokenizer import Tokenizer, split_on, tokenize, unquote


def test_tokens_keep_their_quotes():
    assert tokenize("add-row 0 'a, b',c") == ["add-row", "0", "'a, b',c"]


def test_split_on_ignores_quoted_delimiter():
    assert split_on("'a, b',c") == ["a, b", "c"]


def test_split_on_keeps_empty_items():
    assert split_on("a,,b") == ["a", "", "b"]
    assert split_on("") == []


def test_whitespace_runs_never_make_empty_tokens():
    assert tokenize("  create   a,b  ") == ["create", "a,b"]
    assert tokenize("") == []
    assert tokenize("   ") == []


def test_unterminated_quote_consumes_rest_of_line():
    assert tokenize("edit 0,name 'open end") == ["edit", "0,name", "'open end"]
    assert unquote("'open end") == "open end"


def test_doubled_quote_is_literal():
    assert unquote("'it''s'") == "it's"
    assert split_on("'it''s',x") == ["it's", "x"]


def test_backslash_escapes_delimiter_and_space():
    assert split_on(r"a\,b,c") == ["a,b", "c"]
    assert tokenize(r"a\ b c") == [r"a\ b", "c"]
    assert unquote(r"a\ b") == "a b"


def test_backslash_before_ordinary_character_is_kept():
    assert unquote(r"C:\data\file.csv") == r"C:\data\file.csv"
    assert unquote(r"pattern=\d+") == r"pattern=\d+"


def test_unquote_trims_only_unquoted_whitespace():
    assert unquote("  ' a ' ") == " a "
    assert split_on(" x , ' y ' ") == ["x", " y "]


def test_split_statements():
    t = Tokenizer()
    line = "create a,b; add-row 0 'x;y',z ;; print"
    assert t.split_statements(line) == ["create a,b", "add-row 0 'x;y',z", "print"]
    assert t.split_statements(" ; ") == []


def test_custom_characters():
    t = Tokenizer(quote='"', delimiter="|", separator="&")
    assert t.split_on('"a|b"|c') == ["a|b", "c"]
    assert t.split_statements("print & undo") == ["print", "undo"]


def test_arguments_unquotes_every_token():
    assert Tokenizer().arguments("import 'my file.csv' true") == ["import", "my file.csv", "true"]


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


@given(st.text())
def test_tokenize_never_fails(line):
    tokens = tokenize(line)
    assert all(tokens)


@given(st.text())
def test_quote_value_round_trip(value):
    t = Tokenizer()
    token = t.quote_value(value)
    assert t.unquote(token) == value
    assert t.tokenize(token) == [token]
    assert t.split_on(token) == [value]


@given(st.lists(st.text(), min_size=1, max_size=6))
def test_quoted_list_round_trip(values):
    t = Tokenizer()
    token = t.delimiter.join(t.quote_value(v) for v in values)
    assert t.split_on(token) == values
