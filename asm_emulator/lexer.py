"""
Lexer / Tokenizer for the assembly language.

Converts assembly source text into a stream of tokens for the parser.
Handles identifiers, register names, mnemonics, unsigned integer literals
(decimal and hex), directives, addressing-mode punctuation and newlines,
which the parser treats as statement separators. Comments run from ';'
to the end of the line.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass
from typing import Dict, List

from .ast_nodes import Opcode


# ──────────────────────────────────────────────
# Token types
# ──────────────────────────────────────────────

class TokenType(enum.Enum):
    # Literals
    NUMBER = "NUMBER"

    # Names
    IDENT = "IDENT"
    REGISTER = "REGISTER"
    MNEMONIC = "MNEMONIC"

    # Directives
    DIR_BYTE = ".BYTE"
    DIR_WORD = ".WORD"
    DIR_EQU = ".EQU"

    # Punctuation
    HASH = "#"
    LPAREN = "("
    RPAREN = ")"
    PLUS = "+"
    MINUS = "-"
    COLON = ":"
    COMMA = ","

    # Special
    NEWLINE = "NEWLINE"
    EOF = "EOF"


# ──────────────────────────────────────────────
# Token data class
# ──────────────────────────────────────────────

@dataclass
class Token:
    type: TokenType
    value: str | int
    line: int
    col: int

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, L{self.line}:{self.col})"


# ──────────────────────────────────────────────
# Name tables
# ──────────────────────────────────────────────

REGISTERS = frozenset({"A", "SP", "PC"})

MNEMONICS: Dict[str, Opcode] = {op.value: op for op in Opcode}
MNEMONICS["RET"] = Opcode.RETURN

DIRECTIVES: Dict[str, TokenType] = {
    ".BYTE": TokenType.DIR_BYTE,
    ".WORD": TokenType.DIR_WORD,
    ".EQU": TokenType.DIR_EQU,
}

# ASCII only: str.isdigit() also accepts superscripts and non-Latin digits
DIGITS = frozenset("0123456789")
HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
NAME_START = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz_")
NAME_CHARS = NAME_START | DIGITS

PUNCTUATION: Dict[str, TokenType] = {
    "#": TokenType.HASH,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    ":": TokenType.COLON,
    ",": TokenType.COMMA,
}


# ──────────────────────────────────────────────
# Errors
# ──────────────────────────────────────────────

class AsmSyntaxError(Exception):
    """Source text is not a complete, well-formed program."""
    def __init__(self, message: str, line: int = 0, col: int = 0):
        self.line = line
        self.col = col
        super().__init__(message)


class LexerError(AsmSyntaxError):
    def __init__(self, message: str, line: int, col: int):
        super().__init__(f"Lexer error at L{line}:{col}: {message}", line, col)


# ──────────────────────────────────────────────
# Lexer
# ──────────────────────────────────────────────

class Lexer:
    """Tokenizes assembly source into a list of Tokens."""

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.col = 1
        self.tokens: List[Token] = []

    def _peek(self, offset: int = 0) -> str:
        i = self.pos + offset
        return self.source[i] if i < len(self.source) else "\0"

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _skip_blanks(self):
        while self.pos < len(self.source) and self.source[self.pos] in " \t\r":
            self._advance()

    def _skip_comment(self):
        while self.pos < len(self.source) and self.source[self.pos] != "\n":
            self._advance()

    def _read_word(self) -> str:
        start_pos = self.pos
        while self.pos < len(self.source) and self.source[self.pos] in NAME_CHARS:
            self._advance()
        return self.source[start_pos:self.pos]

    def _read_number(self) -> Token:
        start_line, start_col = self.line, self.col
        start_pos = self.pos

        # Hex: 0x...
        if self._peek() == "0" and self._peek(1) in "xX":
            self._advance()  # '0'
            self._advance()  # 'x'
            while self.pos < len(self.source) and self.source[self.pos] in HEX_DIGITS:
                self._advance()
            text = self.source[start_pos:self.pos]
            if len(text) == 2:
                raise LexerError("Hex literal has no digits", start_line, start_col)
            if self._peek() in NAME_CHARS:
                raise LexerError(f"Malformed number near {self.source[start_pos:self.pos + 1]!r}",
                                 start_line, start_col)
            return Token(TokenType.NUMBER, int(text, 16), start_line, start_col)

        while self.pos < len(self.source) and self.source[self.pos] in DIGITS:
            self._advance()

        # 12abc is neither a number nor an identifier
        if self._peek() in NAME_START:
            raise LexerError(f"Malformed number near {self.source[start_pos:self.pos + 1]!r}",
                             start_line, start_col)

        return Token(TokenType.NUMBER, int(self.source[start_pos:self.pos]), start_line, start_col)

    def _read_name(self) -> Token:
        start_line, start_col = self.line, self.col
        text = self._read_word()
        upper = text.upper()

        if upper in REGISTERS:
            return Token(TokenType.REGISTER, upper, start_line, start_col)
        if upper in MNEMONICS:
            return Token(TokenType.MNEMONIC, MNEMONICS[upper].value, start_line, start_col)
        return Token(TokenType.IDENT, text, start_line, start_col)

    def _read_directive(self) -> Token:
        start_line, start_col = self.line, self.col
        self._advance()  # '.'
        text = "." + self._read_word().upper()
        if text not in DIRECTIVES:
            raise LexerError(f"Unknown directive: {text}", start_line, start_col)
        return Token(DIRECTIVES[text], text, start_line, start_col)

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source and return a list of tokens."""
        self.tokens = []

        while self.pos < len(self.source):
            self._skip_blanks()
            if self.pos >= len(self.source):
                break

            ch = self._peek()

            if ch == ";":
                self._skip_comment()
                continue

            if ch == "\n":
                self.tokens.append(Token(TokenType.NEWLINE, "\n", self.line, self.col))
                self._advance()
                continue

            if ch in DIGITS:
                self.tokens.append(self._read_number())
                continue

            if ch in NAME_START:
                self.tokens.append(self._read_name())
                continue

            if ch == ".":
                self.tokens.append(self._read_directive())
                continue

            if ch in PUNCTUATION:
                self.tokens.append(Token(PUNCTUATION[ch], ch, self.line, self.col))
                self._advance()
                continue

            raise LexerError(f"Unexpected character: {ch!r}", self.line, self.col)

        self.tokens.append(Token(TokenType.EOF, "", self.line, self.col))
        return self.tokens


def tokenize(source: str) -> List[Token]:
    """Convenience wrapper: tokenize source text."""
    return Lexer(source).tokenize()
