"""Best-effort syntax probe for script buffers.

This is not a parser. It tokenizes just enough of the source to skip
strings, template literals, comments, and regular expression literals, and
matches ``()``, ``[]`` and ``{}`` pairs. Anything it cannot classify is left
alone, so it surfaces gross breakage (unbalanced brackets, unterminated
strings or comments) and stays silent on everything else.
"""

from __future__ import annotations

_PAIRS: dict[str, str] = {")": "(", "]": "[", "}": "{"}
_OPENERS: frozenset[str] = frozenset(_PAIRS.values())

# A `/` after one of these starts a regular expression literal, not a division.
_REGEX_PRECEDERS: frozenset[str] = frozenset("(,=:[!&|?{};+-*%<>~^")
_REGEX_KEYWORDS: frozenset[str] = frozenset(
    {
        "return",
        "typeof",
        "instanceof",
        "case",
        "do",
        "else",
        "in",
        "of",
        "new",
        "delete",
        "void",
        "throw",
        "yield",
        "await",
    }
)

# Marks a `{` pushed by `${` so the matching `}` resumes the template literal.
_TEMPLATE_BRACE = "${"


class ScriptSyntaxError(Exception):
    """Raised when the probe finds gross syntax breakage."""


class _Scanner:
    """Single-pass cursor over the source with a bracket stack."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.pos = 0
        self.line = 1
        self.stack: list[tuple[str, int]] = []
        self.prev_char: str | None = None
        self.prev_word = ""

    def _advance(self) -> str:
        char = self.source[self.pos]
        self.pos += 1
        if char == "\n":
            self.line += 1
        return char

    def _peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.source[index] if index < len(self.source) else ""

    def run(self) -> None:
        while self.pos < len(self.source):
            char = self._peek()
            if char.isspace():
                self._advance()
            elif char == "/" and self._peek(1) == "/":
                self._skip_line_comment()
            elif char == "/" and self._peek(1) == "*":
                self._skip_block_comment()
            elif char in "'\"":
                self._skip_string(char)
                self._mark(char)
            elif char == "`":
                self._advance()
                self._scan_template(self.line)
            elif char == "/" and self._is_regex_start():
                self._skip_regex()
                self._mark("/")
            elif char in _OPENERS:
                self._advance()
                self.stack.append((char, self.line))
                self._mark(char)
            elif char in _PAIRS:
                if self._close(char):
                    # `}` closed a `${` substitution; resume the template.
                    self._scan_template(self.line)
                else:
                    self._mark(char)
            elif char.isalnum() or char in "_$":
                self._scan_word()
            elif char in "+-" and self._peek(1) == char:
                self._scan_increment(char)
            else:
                self._advance()
                self._mark(char)

        if self.stack:
            opener, line = self.stack[-1]
            shown = "{" if opener == _TEMPLATE_BRACE else opener
            msg = (
                f"Unexpected end of input: '{shown}' opened on line {line}"
                f" is never closed"
            )
            raise ScriptSyntaxError(msg)

    def _mark(self, char: str) -> None:
        self.prev_char = char
        self.prev_word = ""

    def _scan_word(self) -> None:
        start = self.pos
        while self.pos < len(self.source) and (
            self._peek().isalnum() or self._peek() in "_$"
        ):
            self._advance()
        self.prev_word = self.source[start : self.pos]
        self.prev_char = self.prev_word[-1]

    def _scan_increment(self, char: str) -> None:
        """Consume ``++`` or ``--``, telling postfix from prefix use."""
        is_postfix = (
            bool(self.prev_word) and self.prev_word not in _REGEX_KEYWORDS
        ) or (not self.prev_word and self.prev_char in {")", "]"})
        self._advance()
        self._advance()
        # After a postfix operator an operand has ended, so `/` divides.
        self._mark(char * 2 if is_postfix else char)

    def _is_regex_start(self) -> bool:
        if self.prev_word:
            return self.prev_word in _REGEX_KEYWORDS
        return self.prev_char is None or self.prev_char in _REGEX_PRECEDERS

    def _close(self, char: str) -> bool:
        """Pop the matching opener; return True if it was a template brace."""
        line = self.line
        self._advance()
        if not self.stack:
            msg = f"Unexpected token '{char}' on line {line}"
            raise ScriptSyntaxError(msg)
        opener, _ = self.stack.pop()
        if opener == _TEMPLATE_BRACE and char == "}":
            return True
        if opener != _PAIRS[char]:
            msg = f"Unexpected token '{char}' on line {line}"
            raise ScriptSyntaxError(msg)
        return False

    def _skip_line_comment(self) -> None:
        while self.pos < len(self.source) and self._peek() != "\n":
            self._advance()

    def _skip_block_comment(self) -> None:
        start_line = self.line
        end = self.source.find("*/", self.pos + 2)
        if end == -1:
            msg = f"Unterminated comment starting on line {start_line}"
            raise ScriptSyntaxError(msg)
        while self.pos < end + 2:
            self._advance()

    def _skip_string(self, quote: str) -> None:
        start_line = self.line
        self._advance()
        while self.pos < len(self.source):
            char = self._advance()
            if char == "\\":
                if self.pos < len(self.source):
                    self._advance()
            elif char == quote:
                return
            elif char == "\n":
                break
        msg = f"Invalid or unexpected token: unterminated string on line {start_line}"
        raise ScriptSyntaxError(msg)

    def _scan_template(self, start_line: int) -> None:
        """Consume template text up to the closing backtick or a `${`."""
        while self.pos < len(self.source):
            char = self._advance()
            if char == "\\":
                if self.pos < len(self.source):
                    self._advance()
            elif char == "`":
                self._mark("`")
                return
            elif char == "$" and self._peek() == "{":
                self._advance()
                self.stack.append((_TEMPLATE_BRACE, self.line))
                self._mark("{")
                return
        msg = f"Unterminated template literal starting on line {start_line}"
        raise ScriptSyntaxError(msg)

    def _skip_regex(self) -> None:
        start_line = self.line
        self._advance()
        is_in_class = False
        while self.pos < len(self.source):
            char = self._advance()
            if char == "\\":
                if self.pos < len(self.source):
                    self._advance()
            elif char == "\n":
                break
            elif char == "[":
                is_in_class = True
            elif char == "]":
                is_in_class = False
            elif char == "/" and not is_in_class:
                while self._peek().isalpha():
                    self._advance()
                return
        msg = f"Invalid regular expression: missing / on line {start_line}"
        raise ScriptSyntaxError(msg)


def check_syntax(source: str) -> None:
    """Probe *source* for gross syntax breakage.

    Args:
        source: A script buffer, treated as a standalone function body.

    Raises:
        ScriptSyntaxError: With a message naming the offending line when the
            probe finds an unbalanced bracket or an unterminated string,
            template literal, comment, or regular expression literal.
    """
    _Scanner(source).run()
