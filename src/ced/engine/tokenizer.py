"""Quote- and escape-aware tokenizer for command lines.

Tokens keep their quote characters: quoting only decides where a token ends.
Consumers strip quoting with :meth:`Tokenizer.unquote` for scalar arguments or
split list arguments with :meth:`Tokenizer.split_on`, which honours the same
quoting for the finer delimiter. Inside a quoted span a doubled quote stands
for a literal quote; outside quotes a backslash escapes the quote, the
delimiter, the statement separator, whitespace or another backslash.

Example::

    >>> t = Tokenizer()
    >>> t.tokenize("add-row 0 'a, b',c")
    ['add-row', '0', "'a, b',c"]
    >>> t.split_on("'a, b',c")
    ['a, b', 'c']
"""

from __future__ import annotations

_Item = list[tuple[str, bool]]


class Tokenizer:
    """Splits command lines into tokens, sub-items and statements."""

    def __init__(
        self,
        quote: str = "'",
        delimiter: str = ",",
        separator: str = ";",
        escape: str = "\\",
    ) -> None:
        if len(quote) != 1 or len(delimiter) != 1:
            raise ValueError("quote and delimiter must be single characters")
        self.quote = quote
        self.delimiter = delimiter
        self.separator = separator
        self.escape = escape

    def _escapes(self, text: str, i: int) -> bool:
        """True when text[i] is an escape character protecting text[i + 1]."""
        if text[i] != self.escape or i + 1 >= len(text):
            return False
        nxt = text[i + 1]
        return nxt in (self.quote, self.delimiter, self.separator, self.escape) or nxt.isspace()

    def _doubled_quote(self, text: str, i: int) -> bool:
        return i + 1 < len(text) and text[i + 1] == self.quote

    # -- tokens -------------------------------------------------------------

    def tokenize(self, line: str) -> list[str]:
        """Split on unquoted whitespace. Never fails."""
        tokens: list[str] = []
        buf: list[str] = []
        in_quote = False
        i = 0
        n = len(line)
        while i < n:
            ch = line[i]
            if in_quote:
                buf.append(ch)
                if ch == self.quote:
                    if self._doubled_quote(line, i):
                        buf.append(ch)
                        i += 2
                        continue
                    in_quote = False
            elif self._escapes(line, i):
                buf.append(ch)
                buf.append(line[i + 1])
                i += 2
                continue
            elif ch == self.quote:
                in_quote = True
                buf.append(ch)
            elif ch.isspace():
                if buf:
                    tokens.append("".join(buf))
                    buf = []
            else:
                buf.append(ch)
            i += 1
        # An unterminated quote swallows the rest of the line into this token.
        if buf:
            tokens.append("".join(buf))
        return tokens

    def arguments(self, line: str) -> list[str]:
        return [self.unquote(token) for token in self.tokenize(line)]

    # -- sub-items ----------------------------------------------------------

    def _split(self, text: str, delimiter: str | None) -> list[_Item]:
        items: list[_Item] = [[]]
        in_quote = False
        i = 0
        n = len(text)
        while i < n:
            ch = text[i]
            if in_quote:
                if ch == self.quote:
                    if self._doubled_quote(text, i):
                        items[-1].append((ch, True))
                        i += 2
                        continue
                    in_quote = False
                else:
                    items[-1].append((ch, True))
            elif self._escapes(text, i):
                items[-1].append((text[i + 1], True))
                i += 2
                continue
            elif ch == self.quote:
                in_quote = True
            elif delimiter is not None and ch == delimiter:
                items.append([])
            else:
                items[-1].append((ch, False))
            i += 1
        return items

    @staticmethod
    def _join(item: _Item) -> str:
        start, end = 0, len(item)
        while start < end and not item[start][1] and item[start][0].isspace():
            start += 1
        while end > start and not item[end - 1][1] and item[end - 1][0].isspace():
            end -= 1
        return "".join(ch for ch, _ in item[start:end])

    def unquote(self, token: str) -> str:
        """Strip quoting and escapes; trim unquoted surrounding whitespace."""
        return self._join(self._split(token, None)[0])

    def split_on(self, token: str, delimiter: str | None = None) -> list[str]:
        """Split ``token`` on the delimiter, honouring quotes and escapes."""
        if token == "":
            return []
        return [self._join(item) for item in self._split(token, delimiter or self.delimiter)]

    # -- statements ---------------------------------------------------------

    def split_statements(self, line: str) -> list[str]:
        """Split a line on the unquoted statement separator."""
        statements: list[str] = []
        buf: list[str] = []
        in_quote = False
        i = 0
        n = len(line)
        while i < n:
            ch = line[i]
            if in_quote:
                if ch == self.quote:
                    if self._doubled_quote(line, i):
                        buf.append(ch)
                        buf.append(ch)
                        i += 2
                        continue
                    in_quote = False
                buf.append(ch)
            elif self._escapes(line, i):
                buf.append(ch)
                buf.append(line[i + 1])
                i += 2
                continue
            elif ch == self.quote:
                in_quote = True
                buf.append(ch)
            elif ch == self.separator:
                statements.append("".join(buf))
                buf = []
            else:
                buf.append(ch)
            i += 1
        statements.append("".join(buf))
        return [s.strip() for s in statements if s.strip()]

    def quote_value(self, value: str) -> str:
        """Quote ``value`` so that unquote/split_on give it back unchanged."""
        return f"{self.quote}{value.replace(self.quote, self.quote * 2)}{self.quote}"


_DEFAULT = Tokenizer()


def tokenize(line: str) -> list[str]:
    return _DEFAULT.tokenize(line)


def split_on(token: str, delimiter: str | None = None) -> list[str]:
    return _DEFAULT.split_on(token, delimiter)


def unquote(token: str) -> str:
    return _DEFAULT.unquote(token)
