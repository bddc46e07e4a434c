import pytest

from noxscript_ls.lexical import count_quotes, identifier_before, in_string, word_at

QUOTED = 'foo "bar\\" baz" qux'


@pytest.mark.parametrize("offset", range(QUOTED.index("b"), QUOTED.rindex('"')))
def test_quote_parity_odd_inside_string(offset: int):
    assert count_quotes(QUOTED, offset) % 2 == 1
    assert in_string(QUOTED, offset)


@pytest.mark.parametrize("offset", range(QUOTED.rindex('"'), len(QUOTED)))
def test_quote_parity_even_after_string(offset: int):
    assert count_quotes(QUOTED, offset) % 2 == 0
    assert not in_string(QUOTED, offset)


def test_escaped_quote_does_not_toggle():
    escaped = QUOTED.index('\\"') + 1
    assert count_quotes(QUOTED, escaped) == 1


def test_quote_count_stops_at_line_start():
    text = 'Print("abc\nx'
    assert count_quotes(text, len(text) - 1) == 0
    assert count_quotes(text, text.index("c")) == 1


def test_quote_count_out_of_range_offsets():
    assert count_quotes('"a"', -1) == 0
    assert count_quotes('"a', 50) == 1
    assert count_quotes("", 0) == 0


@pytest.mark.parametrize("offset", range(4, 11))
def test_word_at_returns_whole_identifier(offset: int):
    assert word_at("int my_var2 = 1;", offset) == "my_var2"


def test_word_at_picks_identifier_starting_after_offset():
    # Hovering the first character of a word puts the offset on the space before it.
    assert word_at("int my_var2 = 1;", 3) == "my_var2"
    assert word_at("abc", -1) == "abc"


def test_word_at_without_identifier_is_empty():
    text = "int my_var2 = 1;"
    assert word_at(text, text.index("=")) == ""
    assert word_at("", 0) == ""
    assert word_at("a + b", 100) == "b"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("foo(", "foo"),
        ("foo  (", "foo"),
        ("int foo\n(", "foo"),
        ("x = Random(", "Random"),
        ("a + (", None),
        ("(", None),
        ("   (", None),
    ],
)
def test_identifier_before(text: str, expected):
    assert identifier_before(text, len(text) - 2) == expected


def test_identifier_before_stops_at_second_token():
    text = "void main ("
    assert identifier_before(text, len(text) - 2) == "main"
