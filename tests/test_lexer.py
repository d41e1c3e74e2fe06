"""Test the token stream: whitespace skipping, spans, recovery, and laziness."""

from __future__ import annotations

import pytest

from steplex import classifier
from steplex.errors import ErrorKind, LexError, LexicalError
from steplex.lexer import Lexer, tokenize
from steplex.tokens import Token, TokenKind

from tests.conftest import assert_kinds, assert_texts, errors


class TestWhitespace:
    def test_never_emitted(self, lex):
        items = lex("!HELLO 12345")
        assert [i.as_tuple() for i in items] == [
            (0, TokenKind.USER_DEFINED_KEYWORD, 6),
            (7, TokenKind.INTEGER, 12),
        ]

    def test_all_whitespace_kinds(self, lex):
        items = lex(" \t\n\fA\n\n\tB \f")
        assert_kinds(items, [TokenKind.STANDARD_KEYWORD, TokenKind.STANDARD_KEYWORD])
        assert [(i.start, i.end) for i in items] == [(4, 5), (8, 9)]

    def test_whitespace_only(self, lex):
        assert lex("  \n\t\f ") == []

    def test_carriage_return_is_not_whitespace(self, lex):
        items = lex("A\r\nB")
        assert_kinds(items, [TokenKind.STANDARD_KEYWORD, None, TokenKind.STANDARD_KEYWORD])
        assert errors(items)[0].start == 1


class TestEmptyInput:
    def test_empty_string(self, lex):
        assert lex("") == []

    def test_empty_bytes(self):
        lexer = Lexer(b"")
        with pytest.raises(StopIteration):
            next(lexer)


class TestMultipleTokens:
    def test_mixed_sequence(self, lex):
        source = "!HELLO 12345 123.45 'Hello' #12345 @VALUE1"
        items = lex(source)
        assert_kinds(
            items,
            [
                TokenKind.USER_DEFINED_KEYWORD,
                TokenKind.INTEGER,
                TokenKind.REAL,
                TokenKind.STRING,
                TokenKind.ENTITY_INSTANCE_NAME,
                TokenKind.CONSTANT_VALUE_NAME,
            ],
        )
        assert_texts(items, source, ["!HELLO", "12345", "123.45", "'Hello'", "#12345", "@VALUE1"])

    def test_adjacent_tokens_without_whitespace(self, lex):
        source = "#12.ENUM.'s'"
        items = lex(source)
        assert_kinds(
            items, [TokenKind.ENTITY_INSTANCE_NAME, TokenKind.ENUMERATION, TokenKind.STRING]
        )
        assert_texts(items, source, ["#12", ".ENUM.", "'s'"])

    def test_data_section_fragment(self, lex):
        source = "#10 IFCCARTESIANPOINT 0.0 -2.5 .T. $"
        items = lex(source)
        assert_kinds(
            items,
            [
                TokenKind.ENTITY_INSTANCE_NAME,
                TokenKind.STANDARD_KEYWORD,
                TokenKind.REAL,
                TokenKind.REAL,
                TokenKind.ENUMERATION,
                None,
            ],
        )


class TestErrorRecovery:
    def test_double_at(self, lex):
        source = "!HELLO @12345 @@123"
        items = lex(source)
        assert_kinds(
            items,
            [
                TokenKind.USER_DEFINED_KEYWORD,
                TokenKind.VALUE_INSTANCE_NAME,
                None,
                TokenKind.VALUE_INSTANCE_NAME,
            ],
        )
        assert items[2] == LexicalError(ErrorKind.MALFORMED_NAME, 14, 15)
        assert_texts(items, source, ["!HELLO", "@12345", "@", "@123"])

    def test_stream_continues_after_unterminated_string(self, lex):
        items = lex("'abc DEF")
        assert_kinds(
            items, [None, TokenKind.SIGNATURE_CONTENT, TokenKind.STANDARD_KEYWORD]
        )
        assert items[0].kind == ErrorKind.UNTERMINATED_STRING

    def test_consecutive_errors(self, lex):
        items = lex("();")
        assert_kinds(items, [None, None, None])
        assert [(e.start, e.end) for e in errors(items)] == [(0, 1), (1, 2), (2, 3)]

    def test_real_without_fraction(self, lex):
        items = lex("123. 4")
        assert_kinds(items, [TokenKind.INTEGER, None, TokenKind.INTEGER])

    def test_multibyte_error_unit(self, lex):
        source = "A €B"
        items = lex(source)
        assert_kinds(items, [TokenKind.STANDARD_KEYWORD, None, TokenKind.STANDARD_KEYWORD])
        assert_texts(items, source, ["A", "€", "B"])
        assert (items[1].start, items[1].end) == (2, 5)


class TestByteOffsets:
    def test_offsets_count_bytes(self, lex):
        source = "'ü' A"
        items = lex(source)
        assert [(i.start, i.end) for i in items] == [(0, 4), (5, 6)]

    def test_bytes_input_not_copied(self):
        data = b"#1 #2"
        lexer = Lexer(data)
        assert lexer.data is data

    def test_str_and_bytes_agree(self):
        source = "'ü' #5 @X"
        assert tokenize(source) == tokenize(source.encode("utf-8"))


class TestCursorState:
    def test_span_and_slice_track_last_item(self):
        lexer = Lexer("ABC 'x'")
        next(lexer)
        assert lexer.span == (0, 3)
        assert lexer.slice() == "ABC"
        tok = next(lexer)
        assert lexer.span == (4, 7)
        assert lexer.slice() == "'x'"
        assert lexer.slice(tok) == "'x'"

    def test_offset_advances(self):
        lexer = Lexer("A  B")
        assert lexer.offset == 0
        next(lexer)
        assert lexer.offset == 1
        next(lexer)
        assert lexer.offset == 4

    def test_lazy(self):
        lexer = Lexer("A B C")
        first = next(lexer)
        assert isinstance(first, Token)
        assert lexer.offset == 1

    def test_exhausted_stays_exhausted(self):
        lexer = Lexer("A")
        assert list(lexer) == [Token(0, TokenKind.STANDARD_KEYWORD, 1)]
        assert list(lexer) == []
        with pytest.raises(StopIteration):
            next(lexer)

    def test_iter_returns_self(self):
        lexer = Lexer("A")
        assert iter(lexer) is lexer


class TestDeterminism:
    def test_idempotent(self):
        source = "!HELLO @12345 @@123 'It\\'s' <a:b> \"0F\" dGVzdA=="
        assert tokenize(source) == tokenize(source)

    def test_independent_instances(self):
        a = Lexer("A B")
        b = Lexer("A B")
        next(a)
        assert next(b) == Token(0, TokenKind.STANDARD_KEYWORD, 1)


class TestStrict:
    def test_strict_raises_on_first_error(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("A\n  @@1", strict=True)
        err = exc_info.value
        assert err.error == LexicalError(ErrorKind.MALFORMED_NAME, 4, 5)
        assert err.position.line == 2
        assert err.position.column == 3

    def test_strict_clean_input(self):
        items = tokenize("#1 #2", strict=True)
        assert_kinds(items, [TokenKind.ENTITY_INSTANCE_NAME, TokenKind.ENTITY_INSTANCE_NAME])


class TestUnterminatedStrings:
    def _count_string_scans(self, monkeypatch) -> list[int]:
        calls: list[int] = []
        scan = classifier.SCANNERS[TokenKind.STRING]

        def counting(data: bytes, pos: int) -> int:
            calls.append(pos)
            return scan(data, pos)

        monkeypatch.setitem(classifier.SCANNERS, TokenKind.STRING, counting)
        return calls

    def test_later_quotes_not_rescanned(self, monkeypatch):
        calls = self._count_string_scans(monkeypatch)
        items = tokenize("'" + "\\'" * 2000)
        assert calls == [0]
        assert len(items) == 4001
        assert errors(items)[-1] == LexicalError(ErrorKind.UNTERMINATED_STRING, 4000, 4001)

    def test_strings_before_failure_still_lexed(self, monkeypatch):
        calls = self._count_string_scans(monkeypatch)
        items = tokenize("'ok' A 'open x")
        assert_kinds(
            items,
            [
                TokenKind.STRING,
                TokenKind.STANDARD_KEYWORD,
                None,
                TokenKind.SIGNATURE_CONTENT,
                TokenKind.SIGNATURE_CONTENT,
            ],
        )
        assert calls == [0, 7]

    def test_large_malformed_buffer(self):
        items = tokenize("'" + "\\'" * 20000)
        assert len(items) == 40001
