"""
Recursive-descent parser for the assembly language.

Parses a token stream from the Lexer into the Program AST defined in
ast_nodes. One statement per line:

  [label:] [instruction | directive]   [; comment]

  - Two-operand instructions: MOVE/ADD/SUB/MULT/DIV/MOD source [,] dest
  - Control transfer:         JUMP/CALL/BEQ/BNE/BLT/BGT/BLE/BGE target
  - No operands:              RETURN (alias RET), HALT
  - Directives:               .BYTE name count, .WORD name count, .EQU name value

Addressing modes for destinations:

  R        register               5 / lbl   direct
  (L)off   indexed                (L)+      post-increment
  (L)-     post-decrement         +(L)      pre-increment
  -(L)     pre-decrement          (L)       indirect

where L is a register or a value. Sources additionally accept #value.
The parser is total: the whole token stream must form a program or a
ParseError is raised.
"""

from __future__ import annotations
from typing import List, Optional
from .lexer import AsmSyntaxError, Lexer, Token, TokenType
from .ast_nodes import *


class ParseError(AsmSyntaxError):
    def __init__(self, message: str, token: Token):
        self.token = token
        loc = f"L{token.line}:{token.col}"
        super().__init__(
            f"Parse error at {loc}: {message} (got {token.type.name} = {token.value!r})",
            token.line, token.col,
        )


class Parser:
    """Recursive descent parser producing an AST from tokens."""

    def __init__(self, tokens: List[Token], source: str = ""):
        self.tokens = tokens
        self.source = source
        self.pos = 0

    # ── Helpers ─────────────────────────────

    def _cur(self) -> Token:
        return self.tokens[self.pos]

    def _peek(self, offset: int = 0) -> Token:
        i = self.pos + offset
        if i < len(self.tokens):
            return self.tokens[i]
        return self.tokens[-1]  # EOF

    def _at(self, *types: TokenType) -> bool:
        return self._cur().type in types

    def _advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def _expect(self, ttype: TokenType, msg: str = "") -> Token:
        if self._cur().type != ttype:
            if not msg:
                msg = f"Expected {ttype.value!r}"
            raise ParseError(msg, self._cur())
        return self._advance()

    def _match(self, *types: TokenType) -> Optional[Token]:
        if self._cur().type in types:
            return self._advance()
        return None

    # ── Top-level parsing ─────────────────────

    def parse(self) -> Program:
        """Parse the full token stream into a Program AST."""
        prog = Program(line=1, col=1)

        while not self._at(TokenType.EOF):
            if self._match(TokenType.NEWLINE):
                continue
            prog.declarations.extend(self._parse_statement())
            if not self._at(TokenType.EOF):
                self._expect(TokenType.NEWLINE, "Expected end of line")

        return prog

    def _parse_statement(self) -> List[Declaration]:
        decls: List[Declaration] = []

        # Label: IDENT ':'
        if self._at(TokenType.IDENT) and self._peek(1).type == TokenType.COLON:
            tok = self._advance()
            self._advance()  # ':'
            decls.append(LabelDecl(name=tok.value, line=tok.line, col=tok.col))

        if self._at(TokenType.MNEMONIC):
            tok = self._cur()
            instr = self._parse_instruction()
            decls.append(InstructionDecl(instruction=instr, line=tok.line, col=tok.col))
        elif self._at(TokenType.DIR_BYTE, TokenType.DIR_WORD, TokenType.DIR_EQU):
            decls.append(self._parse_directive())
        elif not decls:
            raise ParseError("Expected label, instruction or directive", self._cur())

        return decls

    def _parse_directive(self) -> Declaration:
        tok = self._advance()
        name = self._expect(TokenType.IDENT, f"{tok.value}: expected a name").value
        number = self._expect(TokenType.NUMBER, f"{tok.value}: expected a number").value

        if tok.type == TokenType.DIR_BYTE:
            return ByteAlloc(name=name, count=number, line=tok.line, col=tok.col)
        if tok.type == TokenType.DIR_WORD:
            return WordAlloc(name=name, count=number, line=tok.line, col=tok.col)
        return ValueDecl(name=name, value=number, line=tok.line, col=tok.col)

    # ── Instructions ──────────────────────────

    def _parse_instruction(self) -> Instruction:
        tok = self._advance()
        opcode = Opcode(tok.value)

        if opcode.is_two_operand:
            source = self._parse_source()
            self._match(TokenType.COMMA)
            dest = self._parse_dest()
            return TwoOperandInstruction(opcode=opcode, source=source, dest=dest,
                                         line=tok.line, col=tok.col)

        if opcode.is_transfer:
            target = self._parse_value(f"{opcode.value}: expected a target")
            return TransferInstruction(opcode=opcode, target=target,
                                       line=tok.line, col=tok.col)

        return BareInstruction(opcode=opcode, line=tok.line, col=tok.col)

    # ── Operands ──────────────────────────────

    def _parse_source(self) -> Source:
        tok = self._cur()
        if self._match(TokenType.HASH):
            value = self._parse_value("Expected a value after '#'")
            return Immediate(value=value, line=tok.line, col=tok.col)
        return self._parse_dest()

    def _parse_dest(self) -> Destination:
        tok = self._cur()

        if self._at(TokenType.REGISTER):
            return DRegister(register=self._parse_register(), line=tok.line, col=tok.col)

        if self._at(TokenType.IDENT, TokenType.NUMBER):
            return DValue(value=self._parse_value(), line=tok.line, col=tok.col)

        # Pre-increment / pre-decrement: +(L) -(L)
        if self._at(TokenType.PLUS, TokenType.MINUS):
            sign = self._advance()
            if not self._at(TokenType.LPAREN) or not self._follows_directly(sign):
                raise ParseError(f"Expected '(' directly after '{sign.value}'", self._cur())
            loc = self._parse_parenthesized()
            if sign.type == TokenType.PLUS:
                return DPreInc(location=loc, line=tok.line, col=tok.col)
            return DPreDec(location=loc, line=tok.line, col=tok.col)

        if self._at(TokenType.LPAREN):
            loc = self._parse_parenthesized()
            # Suffixes must touch the ')': "(A) -(SP)" is indirect then pre-decrement
            if self._follows_directly(self._peek(-1)):
                if self._match(TokenType.PLUS):
                    return DPostInc(location=loc, line=tok.line, col=tok.col)
                if self._match(TokenType.MINUS):
                    return DPostDec(location=loc, line=tok.line, col=tok.col)
                if self._at(TokenType.IDENT, TokenType.NUMBER):
                    return DIndex(location=loc, offset=self._parse_value(), line=tok.line, col=tok.col)
            return DIndirect(location=loc, line=tok.line, col=tok.col)

        raise ParseError("Expected an operand", tok)

    def _follows_directly(self, prev: Token) -> bool:
        """True if the current token starts right after prev, with no blanks."""
        cur = self._cur()
        return cur.line == prev.line and cur.col == prev.col + len(str(prev.value))

    def _parse_parenthesized(self) -> Location:
        self._expect(TokenType.LPAREN)
        if self._at(TokenType.REGISTER):
            loc = self._parse_register()
        else:
            loc = self._parse_value("Expected a register or value inside '( )'")
        self._expect(TokenType.RPAREN)
        return loc

    def _parse_register(self) -> Register:
        tok = self._expect(TokenType.REGISTER)
        return Register(name=tok.value, line=tok.line, col=tok.col)

    def _parse_value(self, msg: str = "Expected a name or number") -> Value:
        tok = self._cur()
        if self._match(TokenType.IDENT):
            return Symbol(name=tok.value, line=tok.line, col=tok.col)
        if self._match(TokenType.NUMBER):
            return Number(value=tok.value, line=tok.line, col=tok.col)
        raise ParseError(msg, tok)


def parse_source(source: str) -> Program:
    """Lex and parse source text into a Program.

    Raises AsmSyntaxError (LexerError or ParseError) unless the whole input
    forms a program.
    """
    tokens = Lexer(source).tokenize()
    return Parser(tokens, source).parse()
