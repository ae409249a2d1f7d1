from enum import Enum, auto
from typing import \
    Any, \
    Callable, \
    Optional, \
    Union, \
    TextIO, \
    List, \
    Tuple, \
    Dict, \
    FrozenSet, \
    NamedTuple, \
    Iterator, \
    Iterable
from abc import ABC, abstractmethod
from anytree import NodeMixin, RenderTree  # type:ignore

import re
import sys
import math
import argparse
import logging
import textwrap

symtab_logger = logging.getLogger("symtab")
exec_logger = logging.getLogger("exec")

Value = Union[float, bool, str, None]


def assert_with(cond: bool, err: Exception) -> None:
    if not cond:
        raise err


def unquote(s: str) -> str:
    assert len(s) >= 2 and s[0] == s[-1] == "'"
    return s[1:-1].replace("''", "'")


def setup_logging(verbose: bool) -> None:
    logging.disable(logging.NOTSET)
    logging.basicConfig(format="{message}", style="{")
    if verbose:
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.INFO)


class TokenTypeValue(NamedTuple):
    pat: str
    re: bool = False
    type: Optional[Callable[[str], Any]] = None
    skip: bool = False


class Position(NamedTuple):
    line: int
    col: int


def _keyword(word: str) -> TokenTypeValue:
    return TokenTypeValue(pat=rf"{word}\b", re=True)


class TokenType(Enum):
    PROGRAM = _keyword("program")
    BEGIN = _keyword("begin")
    END = _keyword("end")
    REPEAT = _keyword("repeat")
    UNTIL = _keyword("until")
    WHILE = _keyword("while")
    DO = _keyword("do")
    IF = _keyword("if")
    THEN = _keyword("then")
    ELSE = _keyword("else")
    FOR = _keyword("for")
    WRITELN = _keyword("writeln")
    WRITE = _keyword("write")
    DIV = _keyword("div")
    MOD = _keyword("mod")
    AND = _keyword("and")
    OR = _keyword("or")
    NOT = _keyword("not")

    REAL = TokenTypeValue(
        pat=r"\d+\.\d+(?:e[+-]?\d+)?|\d+e[+-]?\d+", re=True, type=float)
    INTEGER = TokenTypeValue(pat=r"\d+", re=True, type=int)
    STRING = TokenTypeValue(pat=r"'(?:[^'\n]|'')*'", re=True, type=unquote)
    IDENTIFIER = TokenTypeValue(pat=r"[a-z_]\w*", re=True)
    COLON_EQUALS = TokenTypeValue(pat=":=")
    COLON = TokenTypeValue(pat=":")
    SEMICOLON = TokenTypeValue(pat=";")
    PERIOD = TokenTypeValue(pat=".")
    PLUS = TokenTypeValue(pat="+")
    MINUS = TokenTypeValue(pat="-")
    STAR = TokenTypeValue(pat="*")
    SLASH = TokenTypeValue(pat="/")
    LPAREN = TokenTypeValue(pat="(")
    RPAREN = TokenTypeValue(pat=")")
    NOT_EQUALS = TokenTypeValue(pat="<>")
    LESS_EQUALS = TokenTypeValue(pat="<=")
    GREATER_EQUALS = TokenTypeValue(pat=">=")
    LESS_THAN = TokenTypeValue(pat="<")
    GREATER_THAN = TokenTypeValue(pat=">")
    EQUALS = TokenTypeValue(pat="=")
    COMMENT = TokenTypeValue(pat=r"\{[^}]*\}", re=True, skip=True)
    NEWLINE = TokenTypeValue(pat=r"\n", re=True, skip=True)
    BLANK = TokenTypeValue(pat=r"[ \t\r\f\v]+", re=True, skip=True)
    END_OF_FILE = TokenTypeValue(pat=r"\Z", re=True)
    ERROR = TokenTypeValue(pat=r".", re=True)

    def __repr__(self) -> str:
        return str(self)

    @staticmethod
    def pattern(ident: 'TokenType') -> str:
        pat = ident.value.pat or ''
        return pat if ident.value.re else re.escape(pat)


class Token:
    def __init__(
            self,
            ty: TokenType,
            text: str,
            value: Union[str, int, float, None],
            pos: Position
    ) -> None:
        self.type: TokenType = ty
        self.text: str = text
        self.value: Union[str, int, float, None] = value
        self.pos: Position = pos

    @property
    def lineno(self) -> int:
        return self.pos.line

    def __str__(self) -> str:
        return f"{type(self).__name__}({self.type.name}, {self.text!r})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}" \
               f"({self.type.name}, {self.text!r}, {self.pos})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Token) and \
               self.type == other.type and \
               self.text.lower() == other.text.lower() and \
               self.value == other.value and \
               self.pos == other.pos

    def __ne__(self, other) -> bool:
        return not self.__eq__(other)


class ErrorCode(Enum):
    UNEXPECTED_TOKEN = 'Unexpected token'
    EXPECTING_PROGRAM = 'Expecting PROGRAM'
    EXPECTING_PROGRAM_NAME = 'Expecting program name'
    MISSING_SEMICOLON = 'Missing ;'
    EXPECTING_BEGIN = 'Expecting BEGIN'
    EXPECTING_END = 'Expecting END'
    EXPECTING_PERIOD = 'Expecting .'
    MISSING_COLON_EQUALS = 'Missing :='
    EXPECTING_UNTIL = 'Expecting UNTIL'
    EXPECTING_DO = 'Expecting DO'
    EXPECTING_THEN = 'Expecting THEN'
    EXPECTING_RPAREN = 'Expecting )'
    MISSING_LPAREN = 'Missing left parenthesis'
    MISSING_RPAREN = 'Missing right parenthesis'
    INVALID_WRITE_ARG = 'Invalid WRITE or WRITELN statement'
    INVALID_WRITE = 'Invalid WRITE statement'
    INVALID_FIELD_WIDTH = 'Invalid field width'
    INVALID_DECIMAL_PLACES = 'Invalid count of decimal places'
    UNDECLARED_ID = 'Undeclared identifier'
    DIVISION_BY_ZERO = 'Division by zero'


class Error(Exception):
    LABEL = "ERROR"

    def __init__(
            self,
            error_code: ErrorCode,
            lineno: int,
            text: Optional[str]
    ) -> None:
        self.error_code: ErrorCode = error_code
        self.lineno: int = lineno
        self.text: Optional[str] = text
        self.message: str = self._format()
        super().__init__(self.message)

    def _format(self) -> str:
        return f"{self.LABEL} at line {self.lineno}: " \
               f"{self.error_code.value} at '{self.text}'"


class ParserError(Error):
    LABEL = "SYNTAX ERROR"


class SemanticError(Error):
    LABEL = "SEMANTIC ERROR"


class ExecutorError(Error):
    LABEL = "RUNTIME ERROR"

    def _format(self) -> str:
        return f"{self.LABEL} at line {self.lineno}: " \
               f"{self.error_code.value}: {self.text}"


class ITokenSource(ABC):
    @abstractmethod
    def next_token(self) -> Token:
        pass


class Lexer(ITokenSource, Iterable[Token]):
    __TOKEN_PATTERN: Optional['re.Pattern'] = None

    @classmethod
    def _token_pattern(cls) -> 're.Pattern':
        if cls.__TOKEN_PATTERN is None:
            token_pats = [
                rf"(?P<{tty.name}>{TokenType.pattern(tty)})"
                for tty in TokenType
            ]
            cls.__TOKEN_PATTERN = re.compile("|".join(token_pats), re.I)
        return cls.__TOKEN_PATTERN

    def __init__(self, text: str) -> None:
        self._text: str = text
        self.linenum: int = 1
        self.newline_anchor: int = -1
        self._it: Optional[Iterator[Token]] = None
        self._last: Optional[Token] = None

    def _iter_tokens(self) -> Iterator[Token]:
        for m in self._token_pattern().finditer(self._text):
            name = m.lastgroup if m.lastgroup else ''
            tty = TokenType[name]
            text = m[name]

            if tty.value.skip:
                newlines = text.count("\n")
                if newlines:
                    self.linenum += newlines
                    self.newline_anchor = m.start() + text.rindex("\n")
                continue

            conv = tty.value.type
            yield Token(
                tty,
                text,
                conv(text) if conv is not None else None,
                Position(
                    line=self.linenum,
                    col=m.start(name) - self.newline_anchor
                )
            )

            if tty == TokenType.END_OF_FILE:
                return

    def __iter__(self) -> Iterator[Token]:
        return self._iter_tokens()

    def next_token(self) -> Token:
        if self._last is not None and \
                self._last.type == TokenType.END_OF_FILE:
            return self._last
        if self._it is None:
            self._it = iter(self)
        self._last = next(self._it)
        return self._last


class SymtabEntry:
    def __init__(self, name: str) -> None:
        self.name: str = name
        self.value: Optional[float] = None

    def __str__(self) -> str:
        return f"<{self.name}:{self.value}>"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name='{self.name}', value={self.value})"


class Symtab:
    def __init__(self) -> None:
        self._entries: Dict[str, SymtabEntry] = {}

    def __str__(self) -> str:
        return f"(entries: {[str(e) for e in self._entries.values()]})"

    def __repr__(self) -> str:
        header = "Symbol Table Contents"
        lines = [
            header,
            "=" * len(header),
        ]
        lines += [f"{name:7}: {e!r}" for name, e in self._entries.items()]
        return "\n".join(lines)

    def __getitem__(self, name: str) -> SymtabEntry:
        assert isinstance(name, str), f"name must be a str"
        entry = self._entries.get(name.lower())
        assert entry is not None, f"{name} does not exist"
        return entry

    def __iter__(self) -> Iterator[SymtabEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, name: str) -> Optional[SymtabEntry]:
        symtab_logger.info(f"Lookup: {name}")
        return self._entries.get(name.lower())

    def enter(self, name: str) -> SymtabEntry:
        symtab_logger.info(f"Insert: {name}")
        entry = SymtabEntry(name.lower())
        self._entries[entry.name] = entry
        return entry


class NodeType(Enum):
    PROGRAM = auto()
    COMPOUND = auto()
    ASSIGN = auto()
    LOOP = auto()
    TEST = auto()
    IF = auto()
    WRITE = auto()
    WRITELN = auto()

    VARIABLE = auto()
    INTEGER_CONSTANT = auto()
    REAL_CONSTANT = auto()
    STRING_CONSTANT = auto()

    NEGATE = auto()
    NOT = auto()

    ADD = auto()
    SUBTRACT = auto()
    MULTIPLY = auto()
    DIVIDE = auto()
    INTEGER_DIVIDE = auto()
    MODULO = auto()
    AND = auto()
    OR = auto()
    EQ = auto()
    NE = auto()
    LT = auto()
    LTE = auto()
    GT = auto()
    GTE = auto()

    def __repr__(self) -> str:
        return str(self)


class Node(NodeMixin):
    def __init__(
            self,
            ty: NodeType,
            lineno: int = 0,
            text: Optional[str] = None,
            value: Union[int, float, str, None] = None,
            entry: Optional[SymtabEntry] = None,
            children: Optional[List['Node']] = None
    ) -> None:
        self.type: NodeType = ty
        self.lineno: int = lineno
        self.text: Optional[str] = text
        self.value: Union[int, float, str, None] = value
        self.entry: Optional[SymtabEntry] = entry
        self.children: Tuple['Node', ...] = tuple(children or [])

    @property
    def kids(self) -> Tuple['Node', ...]:
        assert isinstance(self.children, tuple)
        return self.children

    def adopt(self, child: Optional['Node']) -> None:
        if child is not None:
            child.parent = self

    def __str__(self) -> str:
        attrs = []
        if self.text is not None:
            attrs.append(f"text={self.text}")
        if self.value is not None:
            attrs.append(f"value={self.value}")
        return f"{self.type.name}({', '.join(attrs)})"

    def __repr__(self) -> str:
        return str(self)


STATEMENT_STARTERS: FrozenSet[TokenType] = frozenset([
    TokenType.BEGIN,
    TokenType.IDENTIFIER,
    TokenType.REPEAT,
    TokenType.WHILE,
    TokenType.IF,
    TokenType.FOR,
    TokenType.WRITE,
    TokenType.WRITELN,
])

STATEMENT_FOLLOWERS: FrozenSet[TokenType] = frozenset([
    TokenType.SEMICOLON,
    TokenType.END,
    TokenType.UNTIL,
    TokenType.END_OF_FILE,
])

RELATIONAL_OPERATORS: Dict[TokenType, NodeType] = {
    TokenType.EQUALS: NodeType.EQ,
    TokenType.NOT_EQUALS: NodeType.NE,
    TokenType.LESS_THAN: NodeType.LT,
    TokenType.LESS_EQUALS: NodeType.LTE,
    TokenType.GREATER_THAN: NodeType.GT,
    TokenType.GREATER_EQUALS: NodeType.GTE,
}

SIMPLE_EXPRESSION_OPERATORS: Dict[TokenType, NodeType] = {
    TokenType.PLUS: NodeType.ADD,
    TokenType.MINUS: NodeType.SUBTRACT,
    TokenType.OR: NodeType.OR,
}

TERM_OPERATORS: Dict[TokenType, NodeType] = {
    TokenType.STAR: NodeType.MULTIPLY,
    TokenType.SLASH: NodeType.DIVIDE,
    TokenType.DIV: NodeType.INTEGER_DIVIDE,
    TokenType.MOD: NodeType.MODULO,
    TokenType.AND: NodeType.AND,
}

STATEMENT_NODES: FrozenSet[NodeType] = frozenset([
    NodeType.COMPOUND,
    NodeType.ASSIGN,
    NodeType.LOOP,
    NodeType.IF,
    NodeType.WRITE,
    NodeType.WRITELN,
])

UNARY_NODES: FrozenSet[NodeType] = frozenset([
    NodeType.NEGATE,
    NodeType.NOT,
])

OPERATOR_SPELLINGS: Dict[NodeType, str] = {
    NodeType.ADD: "+",
    NodeType.SUBTRACT: "-",
    NodeType.MULTIPLY: "*",
    NodeType.DIVIDE: "/",
    NodeType.INTEGER_DIVIDE: "DIV",
    NodeType.MODULO: "MOD",
    NodeType.AND: "AND",
    NodeType.OR: "OR",
    NodeType.EQ: "=",
    NodeType.NE: "<>",
    NodeType.LT: "<",
    NodeType.LTE: "<=",
    NodeType.GT: ">",
    NodeType.GTE: ">=",
}


class Parser:
    """
    Recursive-descent parser that builds the AST while reporting and
    recovering from syntax errors.

    Diagnostics are printed to ``out`` (stdout when None) as they are found
    and kept in ``errors``. After a syntax error the parser skips tokens up
    to the next statement follower and carries on, so one pass reports as
    many errors as it can.
    """

    def __init__(
            self,
            scanner: ITokenSource,
            symtab: Symtab,
            out: Optional[TextIO] = None
    ) -> None:
        self.scanner: ITokenSource = scanner
        self.symtab: Symtab = symtab
        self.out: Optional[TextIO] = out
        self.current_token: Token = self.scanner.next_token()
        self.lineno: int = 1
        self.errors: List[Error] = []

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def _report(self, err: Error) -> None:
        self.errors.append(err)
        print(err.message, file=self.out)

    def syntax_error(self, errcode: ErrorCode) -> None:
        self._report(
            ParserError(errcode, self.lineno, self.current_token.text))

        while self.current_token.type not in STATEMENT_FOLLOWERS:
            self.advance()

    def semantic_error(self, errcode: ErrorCode) -> None:
        self._report(
            SemanticError(errcode, self.lineno, self.current_token.text))

    def advance(self) -> Token:
        self.current_token = self.scanner.next_token()
        return self.current_token

    def eat(self, toktype: TokenType, errcode: ErrorCode) -> None:
        if self.current_token.type == toktype:
            self.advance()
        else:
            self.syntax_error(errcode)

    def _node(self, ty: NodeType, **kwargs) -> Node:
        return Node(ty, lineno=self.current_token.lineno, **kwargs)

    def program(self) -> Node:
        """program : PROGRAM IDENTIFIER SEMICOLON compound_statement PERIOD"""
        prog = self._node(NodeType.PROGRAM)
        self.eat(TokenType.PROGRAM, ErrorCode.EXPECTING_PROGRAM)

        if self.current_token.type == TokenType.IDENTIFIER:
            prog.text = self.current_token.text
            self.symtab.enter(prog.text)
            self.advance()
        else:
            self.syntax_error(ErrorCode.EXPECTING_PROGRAM_NAME)

        self.eat(TokenType.SEMICOLON, ErrorCode.MISSING_SEMICOLON)

        if self.current_token.type != TokenType.BEGIN:
            self.syntax_error(ErrorCode.EXPECTING_BEGIN)

        prog.adopt(self.compound_statement())

        self.eat(TokenType.PERIOD, ErrorCode.EXPECTING_PERIOD)
        return prog

    def statement(self) -> Optional[Node]:
        """
        statement:
            assignment_statement |
            compound_statement |
            repeat_statement |
            while_statement |
            if_statement |
            write_statement |
            writeln_statement |
            empty
        """
        saved_lineno = self.current_token.lineno
        self.lineno = saved_lineno
        tokty = self.current_token.type

        node: Optional[Node] = None
        if tokty == TokenType.IDENTIFIER:
            node = self.assignment_statement()
        elif tokty == TokenType.BEGIN:
            node = self.compound_statement()
        elif tokty == TokenType.REPEAT:
            node = self.repeat_statement()
        elif tokty == TokenType.WHILE:
            node = self.while_statement()
        elif tokty == TokenType.IF:
            node = self.if_statement()
        elif tokty == TokenType.WRITE:
            node = self.write_statement()
        elif tokty == TokenType.WRITELN:
            node = self.writeln_statement()
        elif tokty not in STATEMENT_FOLLOWERS:
            self.syntax_error(ErrorCode.UNEXPECTED_TOKEN)

        if node is not None:
            node.lineno = saved_lineno
        return node

    def statement_or_empty(self) -> Node:
        """Body of IF, ELSE or WHILE; empty becomes an empty COMPOUND."""
        node = None
        if self.current_token.type not in STATEMENT_FOLLOWERS and \
                self.current_token.type != TokenType.ELSE:
            node = self.statement()
        return node if node is not None else self._node(NodeType.COMPOUND)

    def statement_list(self, parent: Node, terminal: TokenType) -> None:
        """statement_list: statement (SEMICOLON statement)*"""
        while self.current_token.type not in \
                (terminal, TokenType.END_OF_FILE):
            parent.adopt(self.statement())

            tokty = self.current_token.type
            if tokty == TokenType.SEMICOLON:
                while self.current_token.type == TokenType.SEMICOLON:
                    self.advance()
            elif tokty in STATEMENT_STARTERS:
                self.syntax_error(ErrorCode.MISSING_SEMICOLON)
            elif tokty in STATEMENT_FOLLOWERS:
                # END or UNTIL belonging to an enclosing construct
                break

    def compound_statement(self) -> Node:
        """compound_statement: BEGIN statement_list END"""
        node = self._node(NodeType.COMPOUND)
        self.advance()
        self.statement_list(node, TokenType.END)
        self.eat(TokenType.END, ErrorCode.EXPECTING_END)
        return node

    def assignment_statement(self) -> Node:
        """assignment_statement: variable COLON_EQUALS expr"""
        node = self._node(NodeType.ASSIGN)

        name = self.current_token.text
        entry = self.symtab.lookup(name.lower())
        if entry is None:
            entry = self.symtab.enter(name.lower())

        node.adopt(self._node(NodeType.VARIABLE, text=name, entry=entry))
        self.advance()

        self.eat(TokenType.COLON_EQUALS, ErrorCode.MISSING_COLON_EQUALS)
        node.adopt(self.expr())
        return node

    def repeat_statement(self) -> Node:
        """repeat_statement: REPEAT statement_list UNTIL expr"""
        loop = self._node(NodeType.LOOP)
        self.advance()
        self.statement_list(loop, TokenType.UNTIL)

        if self.current_token.type == TokenType.UNTIL:
            self.lineno = self.current_token.lineno
            test = self._node(NodeType.TEST)
            self.advance()
            test.adopt(self.expr())
            loop.adopt(test)
        else:
            self.syntax_error(ErrorCode.EXPECTING_UNTIL)

        return loop

    def while_statement(self) -> Node:
        """
        while_statement: WHILE expr DO statement

        Built as LOOP(TEST(NOT(expr)), statement) so the executor runs it
        with the same loop protocol as REPEAT.
        """
        loop = self._node(NodeType.LOOP)
        self.advance()

        test = self._node(NodeType.TEST)
        negation = self._node(NodeType.NOT)
        loop.adopt(test)
        test.adopt(negation)
        negation.adopt(self.expr())

        self.eat(TokenType.DO, ErrorCode.EXPECTING_DO)
        loop.adopt(self.statement_or_empty())
        return loop

    def if_statement(self) -> Node:
        """if_statement: IF expr THEN statement (ELSE statement)?"""
        node = self._node(NodeType.IF)
        self.advance()
        node.adopt(self.expr())
        self.eat(TokenType.THEN, ErrorCode.EXPECTING_THEN)
        node.adopt(self.statement_or_empty())

        if self.current_token.type == TokenType.ELSE:
            self.advance()
            node.adopt(self.statement_or_empty())

        return node

    def write_statement(self) -> Node:
        """write_statement: WRITE LPAREN write_argument RPAREN"""
        node = self._node(NodeType.WRITE)
        self.advance()

        self.write_arguments(node)
        if not node.kids:
            self.syntax_error(ErrorCode.INVALID_WRITE)

        return node

    def writeln_statement(self) -> Node:
        """writeln_statement: WRITELN (LPAREN write_argument RPAREN)?"""
        node = self._node(NodeType.WRITELN)
        self.advance()

        if self.current_token.type == TokenType.LPAREN:
            self.write_arguments(node)
        return node

    def write_arguments(self, node: Node) -> None:
        """
        write_argument:
            (variable | STRING) (COLON INTEGER (COLON INTEGER)?)?
        """
        self.eat(TokenType.LPAREN, ErrorCode.MISSING_LPAREN)

        has_argument = True
        if self.current_token.type == TokenType.IDENTIFIER:
            node.adopt(self.variable())
        elif self.current_token.type == TokenType.STRING:
            node.adopt(self.string_constant())
        else:
            has_argument = False
            self.syntax_error(ErrorCode.INVALID_WRITE_ARG)

        if has_argument and self.current_token.type == TokenType.COLON:
            self.advance()

            if self.current_token.type == TokenType.INTEGER:
                node.adopt(self.integer_constant())

                if self.current_token.type == TokenType.COLON:
                    self.advance()

                    if self.current_token.type == TokenType.INTEGER:
                        node.adopt(self.integer_constant())
                    else:
                        self.syntax_error(ErrorCode.INVALID_DECIMAL_PLACES)
            else:
                self.syntax_error(ErrorCode.INVALID_FIELD_WIDTH)

        self.eat(TokenType.RPAREN, ErrorCode.MISSING_RPAREN)

    def expr(self) -> Optional[Node]:
        """expr: simple_expr (relational_operator simple_expr)?"""
        node = self.simple_expr()

        curtok = self.current_token
        if curtok.type in RELATIONAL_OPERATORS:
            opnode = self._node(
                RELATIONAL_OPERATORS[curtok.type], text=curtok.text)
            self.advance()
            opnode.adopt(node)
            opnode.adopt(self.simple_expr())
            node = opnode

        return node

    def simple_expr(self) -> Optional[Node]:
        """simple_expr: term ((PLUS | MINUS | OR) term)*"""
        node = self.term()

        while self.current_token.type in SIMPLE_EXPRESSION_OPERATORS:
            curtok = self.current_token
            opnode = self._node(
                SIMPLE_EXPRESSION_OPERATORS[curtok.type], text=curtok.text)
            self.advance()
            opnode.adopt(node)
            opnode.adopt(self.term())
            node = opnode

        return node

    def term(self) -> Optional[Node]:
        """
        term: signed_factor ((STAR | SLASH | DIV | MOD | AND) signed_factor)*
        """
        node = self.signed_factor()

        while self.current_token.type in TERM_OPERATORS:
            curtok = self.current_token
            opnode = self._node(TERM_OPERATORS[curtok.type], text=curtok.text)
            self.advance()
            opnode.adopt(node)
            opnode.adopt(self.signed_factor())
            node = opnode

        return node

    def signed_factor(self) -> Optional[Node]:
        """signed_factor: (PLUS | MINUS)? factor"""
        curtok = self.current_token

        if curtok.type == TokenType.PLUS:
            self.advance()
            return self.factor()
        elif curtok.type == TokenType.MINUS:
            node = self._node(NodeType.NEGATE, text=curtok.text)
            self.advance()
            node.adopt(self.factor())
            return node
        return self.factor()

    def factor(self) -> Optional[Node]:
        """
        factor :
            variable |
            INTEGER |
            REAL |
            LPAREN expr RPAREN |
            NOT factor
        """
        curtok = self.current_token

        if curtok.type == TokenType.IDENTIFIER:
            return self.variable()
        elif curtok.type == TokenType.INTEGER:
            return self.integer_constant()
        elif curtok.type == TokenType.REAL:
            return self.real_constant()
        elif curtok.type == TokenType.LPAREN:
            self.advance()
            node = self.expr()
            self.eat(TokenType.RPAREN, ErrorCode.EXPECTING_RPAREN)
            return node
        elif curtok.type == TokenType.NOT:
            node = self._node(NodeType.NOT, text=curtok.text)
            self.advance()
            node.adopt(self.factor())
            return node

        self.syntax_error(ErrorCode.UNEXPECTED_TOKEN)
        return None

    def variable(self) -> Node:
        """variable: IDENTIFIER"""
        name = self.current_token.text
        entry = self.symtab.lookup(name.lower())
        if entry is None:
            self.semantic_error(ErrorCode.UNDECLARED_ID)

        node = self._node(NodeType.VARIABLE, text=name, entry=entry)
        self.advance()
        return node

    def integer_constant(self) -> Node:
        node = self._node(
            NodeType.INTEGER_CONSTANT, value=self.current_token.value)
        self.advance()
        return node

    def real_constant(self) -> Node:
        node = self._node(
            NodeType.REAL_CONSTANT, value=self.current_token.value)
        self.advance()
        return node

    def string_constant(self) -> Node:
        node = self._node(
            NodeType.STRING_CONSTANT, value=self.current_token.value)
        self.advance()
        return node

    def parse_expr(self) -> Optional[Node]:
        return self.expr()

    def parse_compound(self) -> Node:
        return self.compound_statement()

    def parse_program(self) -> Node:
        return self.program()


class INodeVisitor(ABC):
    def _gen_visit_method_name(self, node: Node) -> str:
        method_name = '_visit_' + node.type.name
        return method_name.lower()

    def visit(self, node: Node) -> Any:
        method_name = self._gen_visit_method_name(node)

        def raise_visit_error(_: Node) -> None:
            assert False, f"No {method_name} method"

        return getattr(self, method_name, raise_visit_error)(node)

    @abstractmethod
    def _visit_program(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_compound(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_assign(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_loop(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_test(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_if(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_write(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_writeln(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_variable(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_integer_constant(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_real_constant(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_string_constant(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_negate(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_not(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_add(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_subtract(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_multiply(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_divide(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_integer_divide(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_modulo(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_and(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_or(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_eq(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_ne(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_lt(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_lte(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_gt(self, node: Node) -> Any:
        pass

    @abstractmethod
    def _visit_gte(self, node: Node) -> Any:
        pass


class Executor(INodeVisitor):
    def __init__(
            self,
            symtab: Optional[Symtab] = None,
            out: Optional[TextIO] = None
    ) -> None:
        self.symtab: Optional[Symtab] = symtab
        self.out: Optional[TextIO] = out
        self.lineno: int = 0

    def visit(self, node: Node) -> Value:
        if node.type in STATEMENT_NODES:
            self.lineno = node.lineno
        return super().visit(node)

    def _assert(self, cond: bool, errcode: ErrorCode, node: Node) -> None:
        assert_with(cond, ExecutorError(errcode, self.lineno, node.text))

    @staticmethod
    def _number(value: Value) -> float:
        if value is None:
            return 0.0
        assert not isinstance(value, str), f"{value!r} is not a number"
        return float(value)

    @staticmethod
    def _boolean(value: Value) -> bool:
        return bool(value)

    def _operands(self, node: Node) -> Tuple[float, float]:
        left, right = node.kids
        lval = self._number(self.visit(left))
        rval = self._number(self.visit(right))
        return lval, rval

    def _divisor(self, node: Node) -> Tuple[float, float]:
        lval, rval = self._operands(node)
        self._assert(rval != 0.0, ErrorCode.DIVISION_BY_ZERO, node)
        return lval, rval

    def _visit_program(self, node: Node) -> None:
        for child in node.kids:
            self.visit(child)

    def _visit_compound(self, node: Node) -> None:
        for child in node.kids:
            self.visit(child)

    def _visit_assign(self, node: Node) -> None:
        lhs, rhs = node.kids
        assert lhs.entry is not None
        lhs.entry.value = self._number(self.visit(rhs))

    def _visit_loop(self, node: Node) -> None:
        while True:
            for child in node.kids:
                value = self.visit(child)
                if child.type == NodeType.TEST and value:
                    return

    def _visit_test(self, node: Node) -> bool:
        return self._boolean(self.visit(node.kids[0]))

    def _visit_if(self, node: Node) -> None:
        cond, *branches = node.kids
        if self._boolean(self.visit(cond)):
            self.visit(branches[0])
        elif len(branches) > 1:
            self.visit(branches[1])

    def _print_value(self, args: Tuple[Node, ...]) -> None:
        width: Optional[int] = None
        decimals: Optional[int] = None

        if len(args) > 1:
            width = int(self._number(self.visit(args[1])))
            if len(args) > 2:
                decimals = int(self._number(self.visit(args[2])))

        value_node = args[0]
        if value_node.type == NodeType.STRING_CONSTANT:
            fmt = "%"
            if width is not None and width > 0:
                fmt += str(width)
            fmt += "s"
            text = fmt % self.visit(value_node)
        else:
            fmt = "%"
            if width is not None:
                fmt += str(width)
            if decimals is not None:
                fmt += f".{decimals}"
            fmt += "f"
            text = fmt % self._number(self.visit(value_node))

        print(text, end="", file=self.out)

    def _visit_write(self, node: Node) -> None:
        self._print_value(node.kids)

    def _visit_writeln(self, node: Node) -> None:
        if node.kids:
            self._print_value(node.kids)
        print(file=self.out)

    def _visit_variable(self, node: Node) -> Value:
        entry = node.entry
        if entry is None and self.symtab is not None:
            entry = self.symtab.lookup(node.text or '')
        return entry.value if entry is not None else None

    def _visit_integer_constant(self, node: Node) -> float:
        return self._number(node.value)

    def _visit_real_constant(self, node: Node) -> float:
        return self._number(node.value)

    def _visit_string_constant(self, node: Node) -> str:
        assert isinstance(node.value, str)
        return node.value

    def _visit_negate(self, node: Node) -> float:
        return -self._number(self.visit(node.kids[0]))

    def _visit_not(self, node: Node) -> bool:
        return not self._boolean(self.visit(node.kids[0]))

    def _visit_add(self, node: Node) -> float:
        lval, rval = self._operands(node)
        return lval + rval

    def _visit_subtract(self, node: Node) -> float:
        lval, rval = self._operands(node)
        return lval - rval

    def _visit_multiply(self, node: Node) -> float:
        lval, rval = self._operands(node)
        return lval * rval

    def _visit_divide(self, node: Node) -> float:
        lval, rval = self._divisor(node)
        return lval / rval

    def _visit_integer_divide(self, node: Node) -> float:
        lval, rval = self._divisor(node)
        return float(math.trunc(lval / rval))

    def _visit_modulo(self, node: Node) -> float:
        lval, rval = self._divisor(node)
        return math.fmod(lval, rval)

    def _visit_and(self, node: Node) -> bool:
        left, right = node.kids
        lval = self._boolean(self.visit(left))
        rval = self._boolean(self.visit(right))
        return lval and rval

    def _visit_or(self, node: Node) -> bool:
        left, right = node.kids
        lval = self._boolean(self.visit(left))
        rval = self._boolean(self.visit(right))
        return lval or rval

    def _visit_eq(self, node: Node) -> bool:
        lval, rval = self._operands(node)
        return lval == rval

    def _visit_ne(self, node: Node) -> bool:
        lval, rval = self._operands(node)
        return lval != rval

    def _visit_lt(self, node: Node) -> bool:
        lval, rval = self._operands(node)
        return lval < rval

    def _visit_lte(self, node: Node) -> bool:
        lval, rval = self._operands(node)
        return lval <= rval

    def _visit_gt(self, node: Node) -> bool:
        lval, rval = self._operands(node)
        return lval > rval

    def _visit_gte(self, node: Node) -> bool:
        lval, rval = self._operands(node)
        return lval >= rval

    def execute(self, tree: Node) -> None:
        assert tree.type == NodeType.PROGRAM
        self.visit(tree)
        if self.symtab is not None:
            exec_logger.info(repr(self.symtab))


class SourceBuilder(INodeVisitor):
    """Rebuilds canonical source text from an AST."""

    INDENT = "    "

    def _indent(self, node: Node) -> str:
        return textwrap.indent(self.visit(node), self.INDENT)

    def _operand(self, node: Node) -> str:
        src = self.visit(node)
        return f"({src})" if node.type in UNARY_NODES else src

    def _binop(self, node: Node) -> str:
        left, right = node.kids
        op = OPERATOR_SPELLINGS[node.type]
        return f"({self._operand(left)} {op} {self._operand(right)})"

    @staticmethod
    def _is_while(node: Node) -> bool:
        kids = node.kids
        return len(kids) == 2 and \
            kids[0].type == NodeType.TEST and \
            kids[0].kids[0].type == NodeType.NOT and \
            kids[1].type != NodeType.TEST

    def _visit_program(self, node: Node) -> str:
        body = "".join(self.visit(child) for child in node.kids)
        return f"PROGRAM {node.text};\n{body}.\n"

    def _visit_compound(self, node: Node) -> str:
        if not node.kids:
            return "BEGIN\nEND"
        body = ";\n".join(self._indent(child) for child in node.kids)
        return f"BEGIN\n{body}\nEND"

    def _visit_assign(self, node: Node) -> str:
        lhs, rhs = node.kids
        return f"{lhs.text} := {self.visit(rhs)}"

    def _visit_loop(self, node: Node) -> str:
        if self._is_while(node):
            test, body = node.kids
            cond = self.visit(test.kids[0].kids[0])
            return f"WHILE {cond} DO\n{self._indent(body)}"

        *stmts, test = node.kids
        lines = ["REPEAT"]
        if stmts:
            lines.append(";\n".join(self._indent(stmt) for stmt in stmts))
        lines.append(f"UNTIL {self.visit(test)}")
        return "\n".join(lines)

    def _visit_test(self, node: Node) -> str:
        return self.visit(node.kids[0])

    def _visit_if(self, node: Node) -> str:
        cond, *branches = node.kids
        then_blk = branches[0]
        if len(branches) > 1 and then_blk.type == NodeType.IF and \
                len(then_blk.kids) < 3:
            then_src = textwrap.indent(
                f"BEGIN\n{self._indent(then_blk)}\nEND", self.INDENT)
        else:
            then_src = self._indent(then_blk)

        src = f"IF {self.visit(cond)} THEN\n{then_src}"
        if len(branches) > 1:
            src += f"\nELSE\n{self._indent(branches[1])}"
        return src

    def _write_args(self, node: Node) -> str:
        value, *fmt = node.kids
        args = [self.visit(value)] + [str(kid.value) for kid in fmt]
        return f"({':'.join(args)})"

    def _visit_write(self, node: Node) -> str:
        return "WRITE" + self._write_args(node)

    def _visit_writeln(self, node: Node) -> str:
        return "WRITELN" + (self._write_args(node) if node.kids else "")

    def _visit_variable(self, node: Node) -> str:
        return node.text or ''

    def _visit_integer_constant(self, node: Node) -> str:
        return str(node.value)

    def _visit_real_constant(self, node: Node) -> str:
        return repr(node.value)

    def _visit_string_constant(self, node: Node) -> str:
        text = str(node.value).replace("'", "''")
        return f"'{text}'"

    def _visit_negate(self, node: Node) -> str:
        return f"-{self._operand(node.kids[0])}"

    def _visit_not(self, node: Node) -> str:
        return f"NOT {self._operand(node.kids[0])}"

    def _visit_add(self, node: Node) -> str:
        return self._binop(node)

    def _visit_subtract(self, node: Node) -> str:
        return self._binop(node)

    def _visit_multiply(self, node: Node) -> str:
        return self._binop(node)

    def _visit_divide(self, node: Node) -> str:
        return self._binop(node)

    def _visit_integer_divide(self, node: Node) -> str:
        return self._binop(node)

    def _visit_modulo(self, node: Node) -> str:
        return self._binop(node)

    def _visit_and(self, node: Node) -> str:
        return self._binop(node)

    def _visit_or(self, node: Node) -> str:
        return self._binop(node)

    def _visit_eq(self, node: Node) -> str:
        return self._binop(node)

    def _visit_ne(self, node: Node) -> str:
        return self._binop(node)

    def _visit_lt(self, node: Node) -> str:
        return self._binop(node)

    def _visit_lte(self, node: Node) -> str:
        return self._binop(node)

    def _visit_gt(self, node: Node) -> str:
        return self._binop(node)

    def _visit_gte(self, node: Node) -> str:
        return self._binop(node)

    def build(self, tree: Node) -> str:
        return self.visit(tree)


def main() -> None:
    argparser = argparse.ArgumentParser(
        description="tree-walking interpreter for a small pascal subset")
    argparser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="verbose debugging output"
    )
    argparser.add_argument(
        "-t", "--tree",
        action="store_true",
        help="print the parse tree"
    )
    argparser.add_argument(
        "-s", "--src-to-src",
        action="store_true",
        help="print the source rebuilt from the parse tree instead of running"
    )
    argparser.add_argument("FILE", help="pascal source file")
    args = argparser.parse_args()

    setup_logging(args.verbose)

    with open(args.FILE) as pascal_file:
        text = pascal_file.read()

    symtab: Symtab = Symtab()
    parser: Parser = Parser(Lexer(text), symtab)
    tree: Node = parser.parse_program()

    if args.tree:
        print(RenderTree(tree))

    if parser.error_count > 0:
        print(f"\nThere were {parser.error_count} syntax errors.")
        sys.exit(1)

    if args.src_to_src:
        print(SourceBuilder().build(tree), end="")
        return

    try:
        Executor(symtab).execute(tree)
    except ExecutorError as e:
        print(e.message)
        sys.exit(-2)


logging.disable(logging.CRITICAL)
if __name__ == '__main__':
    main()
