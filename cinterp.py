#!/usr/bin/env python3
from __future__ import annotations

import operator
import re
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

# ----------------------------
# Errors
# ----------------------------

@dataclass(frozen=True)
class Loc:
    line: int
    col: int

    def __str__(self) -> str:
        return f"{self.line}:{self.col}"

NOWHERE = Loc(0, 0)


class CError(Exception):
    """Base of every error raised while lexing, parsing, checking or running a program."""

    def __init__(self, message: str, loc: Loc = NOWHERE):
        self.message = message
        self.loc = loc
        super().__init__(f"{loc}: error: {self.kind}: {message}")

    @property
    def kind(self) -> str:
        return type(self).__name__


class LexError(CError):
    pass

class ParseError(CError):
    def __init__(self, expected: str, found: str, loc: Loc):
        self.expected = expected
        self.found = found
        super().__init__(f"expected {expected}, found {found}", loc)

class SemanticError(CError):
    pass

class UndeclaredIdentifier(SemanticError):
    pass

class ArityMismatch(SemanticError):
    pass

class TypeMismatch(SemanticError):
    pass

class InvalidArraySize(SemanticError):
    pass

class MissingReturn(SemanticError):
    pass

class Redeclaration(SemanticError):
    pass

class MissingMain(SemanticError):
    pass


class ExecutionError(CError):
    """A fault detected while the program runs; `func` names the function executing."""

    def __init__(self, message: str, loc: Loc = NOWHERE, func: Optional[str] = None):
        self.func = func
        if func is not None:
            message = f"{message} (in '{func}')"
        super().__init__(message, loc)

class DivisionByZero(ExecutionError):
    pass

class InvalidPointerOp(ExecutionError):
    pass

class OutOfBounds(ExecutionError):
    pass

class NoReturnFromMain(ExecutionError):
    pass

class MissingReturnValue(ExecutionError):
    pass

class StackOverflow(ExecutionError):
    pass

class StepLimitExceeded(ExecutionError):
    pass


# host frames the parser and checker may need on deeply nested source
FRONT_END_RECURSION = 50_000

@contextmanager
def recursion_limit(limit: int) -> Iterator[None]:
    """Raise the host recursion limit to at least `limit` for the duration of the block."""
    old = sys.getrecursionlimit()
    sys.setrecursionlimit(max(old, limit))
    try:
        yield
    finally:
        sys.setrecursionlimit(old)


# ----------------------------
# Lexer
# ----------------------------

KEYWORDS = {"int", "void", "if", "else", "while", "for", "return"}
# recognised so the parser can reject them by name
RESERVED = {"break", "continue"}

INT_MIN = -2**31
INT_MAX = 2**31 - 1

TOKEN_SPEC = [
    ("COMMENT",  r"//[^\n]*|/\*.*?\*/"),
    ("OPEN",     r"/\*"),
    ("NUMBER",   r"[0-9]+"),
    ("ID",       r"[A-Za-z_][A-Za-z0-9_]*"),
    ("OP",       r"==|!=|<=|>=|&&|\|\||[+\-*/%<>=!]"),
    ("PUNCT",    r"[(){}\[\];,&]"),
    ("SKIP",     r"\s+"),
    ("MISMATCH", r"."),
]

TOKEN_RE = re.compile("|".join(f"(?P<{name}>{pat})" for name, pat in TOKEN_SPEC), re.DOTALL)

@dataclass(frozen=True)
class Tok:
    kind: str
    value: str
    pos: int
    line: int = 1
    col: int = 1

    @property
    def loc(self) -> Loc:
        return Loc(self.line, self.col)

def _scan(src: str) -> Iterator[Tok]:
    line, line_start = 1, 0
    for m in TOKEN_RE.finditer(src):
        kind = m.lastgroup
        val = m.group()
        pos = m.start()
        loc = Loc(line, pos - line_start + 1)
        if kind == "MISMATCH":
            raise LexError(f"unexpected character {val!r}", loc)
        if kind == "OPEN":
            raise LexError("unterminated comment", loc)
        if kind == "NUMBER" and int(val) > INT_MAX:
            raise LexError(f"integer literal {val} does not fit in an int", loc)
        if kind == "ID" and (val in KEYWORDS or val in RESERVED):
            kind = "KW"
        if kind not in ("COMMENT", "SKIP"):
            yield Tok(kind, val, pos, loc.line, loc.col)
        newlines = val.count("\n")
        if newlines:
            line += newlines
            line_start = pos + val.rfind("\n") + 1
    yield Tok("EOF", "", len(src), line, len(src) - line_start + 1)

class TokenStream:
    """Tokens of one source text, lexed on demand.

    Every iteration starts over from the beginning of the source, so the
    stream can be walked any number of times. The last token is always EOF.
    """

    def __init__(self, src: str):
        self.src = src

    def __iter__(self) -> Iterator[Tok]:
        return _scan(self.src)

def tokenize(src: str) -> TokenStream:
    return TokenStream(src)

def lex(src: str) -> List[Tok]:
    return list(tokenize(src))


# ----------------------------
# Types & symbols
# ----------------------------

@dataclass(frozen=True)
class CType:
    kind: str                   # "int", "ptr", "array" or "void"
    size: Optional[int] = None  # arrays only; None until inferred from an initializer

    def __str__(self) -> str:
        if self.kind == "ptr":
            return "int*"
        if self.kind == "array":
            return f"int[{'' if self.size is None else self.size}]"
        return self.kind

    @property
    def cells(self) -> int:
        return self.size if self.kind == "array" else 1

    def decay(self) -> CType:
        return PTR if self.kind == "array" else self

INT = CType("int")
PTR = CType("ptr")
VOID = CType("void")

def array_of(size: Optional[int]) -> CType:
    return CType("array", size)

@dataclass(eq=False)
class Symbol:
    name: str
    ty: CType
    level: int      # scope depth, 0 = global
    slot: int       # index into the globals or into the function's frame
    loc: Loc = NOWHERE

    @property
    def is_global(self) -> bool:
        return self.level == 0

@dataclass(eq=False)
class FuncSymbol:
    name: str
    ret: CType
    params: List[CType]
    loc: Loc = NOWHERE
    defn: Optional["FuncDef"] = None
    called_at: Optional[Loc] = None


# ----------------------------
# AST
# ----------------------------

class Stmt: pass

class Expr:
    ty: Optional[CType] = None  # set by the checker

@dataclass
class Param:
    name: str
    ty: CType       # INT or PTR; `int a[]` arrives as PTR
    loc: Loc = NOWHERE
    sym: Optional[Symbol] = field(default=None, compare=False, repr=False)

@dataclass
class InitList:
    items: List[Expr]
    loc: Loc = NOWHERE

@dataclass
class VarDecl:
    name: str
    ty: CType
    init: Optional[Union[Expr, InitList]] = None
    loc: Loc = NOWHERE
    sym: Optional[Symbol] = field(default=None, compare=False, repr=False)

@dataclass
class DeclStmt(Stmt):
    decls: List[VarDecl]
    loc: Loc = NOWHERE

@dataclass
class Block(Stmt):
    stmts: List[Stmt]
    loc: Loc = NOWHERE

@dataclass
class FuncDef:
    name: str
    ret: CType
    params: List[Param]
    body: Optional[Block]       # None for a prototype
    loc: Loc = NOWHERE
    sym: Optional[FuncSymbol] = field(default=None, compare=False, repr=False)
    frame: List[Symbol] = field(default_factory=list, compare=False, repr=False)

@dataclass
class Program:
    items: List[Union[FuncDef, DeclStmt]]
    loc: Loc = NOWHERE
    storage: List[Symbol] = field(default_factory=list, compare=False, repr=False)
    entry: Optional[FuncSymbol] = field(default=None, compare=False, repr=False)

    @property
    def funcs(self) -> List[FuncDef]:
        return [it for it in self.items if isinstance(it, FuncDef)]

    @property
    def decls(self) -> List[DeclStmt]:
        return [it for it in self.items if isinstance(it, DeclStmt)]

@dataclass
class Return(Stmt):
    expr: Optional["Expr"]
    loc: Loc = NOWHERE

@dataclass
class If(Stmt):
    cond: "Expr"
    then: Stmt
    other: Optional[Stmt]
    loc: Loc = NOWHERE

@dataclass
class While(Stmt):
    cond: "Expr"
    body: Stmt
    loc: Loc = NOWHERE

@dataclass
class For(Stmt):
    init: Optional[Stmt]        # DeclStmt / ExprStmt / None
    cond: Optional["Expr"]      # None => true
    post: Optional["Expr"]
    body: Stmt
    loc: Loc = NOWHERE

@dataclass
class ExprStmt(Stmt):
    expr: "Expr"
    loc: Loc = NOWHERE

@dataclass
class Num(Expr):
    value: int
    loc: Loc = NOWHERE

@dataclass
class Var(Expr):
    name: str
    loc: Loc = NOWHERE
    sym: Optional[Symbol] = field(default=None, compare=False, repr=False)

@dataclass
class Call(Expr):
    name: str
    args: List[Expr]
    loc: Loc = NOWHERE
    func: Optional[FuncSymbol] = field(default=None, compare=False, repr=False)

@dataclass
class Unary(Expr):
    op: str         # "-", "!", "*" (dereference) or "&" (address-of)
    rhs: Expr
    loc: Loc = NOWHERE

@dataclass
class Binary(Expr):
    op: str
    lhs: Expr
    rhs: Expr
    loc: Loc = NOWHERE

@dataclass
class Index(Expr):
    base: Expr
    index: Expr
    loc: Loc = NOWHERE

@dataclass
class Assign(Expr):
    target: Expr   # lvalue (Var, Unary("*", ...), Index)
    rhs: Expr
    loc: Loc = NOWHERE

def is_lvalue(e: Expr) -> bool:
    return isinstance(e, (Var, Index)) or (isinstance(e, Unary) and e.op == "*")

_HIDDEN = {"loc", "sym", "func", "frame", "storage", "entry"}

def format_ast(node) -> str:
    """Render an AST as an indented tree, one node per line."""
    lines: List[str] = []
    todo = [(node, 0, "")]
    while todo:
        n, depth, label = todo.pop()
        attrs: List[str] = []
        children = []
        for f in fields(n):
            if f.name in _HIDDEN:
                continue
            v = getattr(n, f.name)
            if isinstance(v, list):
                children.extend((f.name, c) for c in v)
            elif is_dataclass(v) and not isinstance(v, CType):
                children.append((f.name, v))
            elif v is not None:
                attrs.append(str(v))
        head = " ".join([type(n).__name__] + attrs)
        prefix = f"{label}: " if label else ""
        lines.append(f"{'  ' * depth}{prefix}{head} @{n.loc}")
        # reversed so the first child is printed first
        todo.extend((child, depth + 1, name) for name, child in reversed(children))
    return "\n".join(lines)


# ----------------------------
# Parser (recursive descent, precedence climbing for binary operators)
# ----------------------------

KIND_NAMES = {
    "ID": "identifier",
    "NUMBER": "integer literal",
    "KW": "keyword",
    "OP": "operator",
    "PUNCT": "punctuation",
    "EOF": "end of input",
}

class Parser:
    # statements, parenthesised and prefix expressions open one level each
    MAX_NESTING = 1000

    def __init__(self, toks: Iterable[Tok]):
        self.toks = list(toks)
        if not self.toks or self.toks[-1].kind != "EOF":
            last = self.toks[-1] if self.toks else None
            self.toks.append(Tok("EOF", "", last.pos + len(last.value) if last else 0,
                                 last.line if last else 1, last.col + len(last.value) if last else 1))
        self.i = 0
        self.depth = 0

    @contextmanager
    def nested(self, what: str) -> Iterator[None]:
        self.depth += 1
        try:
            if self.depth > self.MAX_NESTING:
                raise ParseError(f"at most {self.MAX_NESTING} levels of nesting",
                                 f"{what} nested too deeply", self.cur().loc)
            yield
        finally:
            self.depth -= 1

    def cur(self) -> Tok:
        return self.toks[self.i]

    def fail(self, expected: str):
        t = self.cur()
        found = "end of input" if t.kind == "EOF" else repr(t.value)
        raise ParseError(expected, found, t.loc)

    def eat(self, kind: str, value: Optional[str] = None) -> Tok:
        t = self.cur()
        if t.kind != kind or (value is not None and t.value != value):
            self.fail(repr(value) if value is not None else KIND_NAMES[kind])
        self.i += 1
        return t

    def match(self, kind: str, value: Optional[str] = None, offset: int = 0) -> bool:
        t = self.toks[min(self.i + offset, len(self.toks) - 1)]
        if t.kind != kind:
            return False
        if value is not None and t.value != value:
            return False
        return True

    def accept(self, kind: str, value: Optional[str] = None) -> bool:
        if self.match(kind, value):
            self.i += 1
            return True
        return False

    # ---------- declarations ----------

    def parse_program(self) -> Program:
        items: List[Union[FuncDef, DeclStmt]] = []
        while not self.match("EOF"):
            items.append(self.parse_external())
        return Program(items, Loc(1, 1))

    def parse_external(self) -> Union[FuncDef, DeclStmt]:
        start = self.cur()
        # legacy `main()` with an implicit int return type
        if self.match("ID", "main") and self.match("PUNCT", "(", 1):
            return self.parse_func(INT, start)
        if self.accept("KW", "void"):
            return self.parse_func(VOID, start)
        if not self.match("KW", "int"):
            self.fail("'int' or 'void'")
        self.eat("KW", "int")
        if self.match("ID") and self.match("PUNCT", "(", 1):
            return self.parse_func(INT, start)
        return self.parse_declarators(start)

    def parse_func(self, ret: CType, start: Tok) -> FuncDef:
        name = self.eat("ID").value
        self.eat("PUNCT", "(")
        params = self.parse_params()
        self.eat("PUNCT", ")")
        body = None
        if not self.accept("PUNCT", ";"):
            body = self.parse_block()
        return FuncDef(name, ret, params, body, start.loc)

    def parse_params(self) -> List[Param]:
        params: List[Param] = []
        if self.match("PUNCT", ")"):
            return params
        if self.match("KW", "void") and self.match("PUNCT", ")", 1):
            self.eat("KW", "void")
            return params
        while True:
            start = self.eat("KW", "int")
            ty = INT
            if self.accept("OP", "*"):
                ty = PTR
            name = self.eat("ID").value
            if ty == INT and self.accept("PUNCT", "["):
                # the size of an array parameter is allowed but ignored
                if self.match("NUMBER"):
                    self.eat("NUMBER")
                self.eat("PUNCT", "]")
                ty = PTR
            params.append(Param(name, ty, start.loc))
            if not self.accept("PUNCT", ","):
                break
        return params

    def parse_declarators(self, start: Tok) -> DeclStmt:
        """Parse `a, *p, b[N] = {...};` after the leading `int` has been consumed."""
        decls: List[VarDecl] = []
        while True:
            loc = self.cur().loc
            ty = INT
            if self.accept("OP", "*"):
                ty = PTR
            name = self.eat("ID").value
            if ty == INT and self.accept("PUNCT", "["):
                ty = array_of(self.parse_array_size())
                self.eat("PUNCT", "]")
            init: Optional[Union[Expr, InitList]] = None
            if self.accept("OP", "="):
                if self.match("PUNCT", "{"):
                    init = self.parse_init_list()
                else:
                    init = self.parse_expr()
            decls.append(VarDecl(name, ty, init, loc))
            if not self.accept("PUNCT", ","):
                break
        self.eat("PUNCT", ";")
        return DeclStmt(decls, start.loc)

    def parse_array_size(self) -> Optional[int]:
        if self.match("PUNCT", "]"):
            return None
        neg = self.accept("OP", "-")
        if not self.match("NUMBER"):
            self.fail("integer array size")
        n = int(self.eat("NUMBER").value)
        return -n if neg else n

    def parse_init_list(self) -> InitList:
        start = self.eat("PUNCT", "{")
        items: List[Expr] = []
        while not self.match("PUNCT", "}"):
            items.append(self.parse_expr())
            if not self.accept("PUNCT", ","):
                break
        self.eat("PUNCT", "}")
        return InitList(items, start.loc)

    # ---------- statements ----------

    def parse_block(self) -> Block:
        start = self.eat("PUNCT", "{")
        stmts: List[Stmt] = []
        while not self.match("PUNCT", "}"):
            if self.match("EOF"):
                self.fail("'}'")
            stmts.append(self.parse_stmt())
        self.eat("PUNCT", "}")
        return Block(stmts, start.loc)

    def parse_stmt(self) -> Stmt:
        with self.nested("statement"):
            return self._parse_stmt()

    def _parse_stmt(self) -> Stmt:
        t = self.cur()

        if self.match("PUNCT", "{"):
            return self.parse_block()

        if self.accept("KW", "return"):
            e = None
            if not self.match("PUNCT", ";"):
                e = self.parse_expr()
            self.eat("PUNCT", ";")
            return Return(e, t.loc)

        if self.accept("KW", "if"):
            self.eat("PUNCT", "(")
            cond = self.parse_expr()
            self.eat("PUNCT", ")")
            then = self.parse_stmt()
            other = None
            if self.accept("KW", "else"):
                other = self.parse_stmt()
            return If(cond, then, other, t.loc)

        if self.accept("KW", "while"):
            self.eat("PUNCT", "(")
            cond = self.parse_expr()
            self.eat("PUNCT", ")")
            body = self.parse_stmt()
            return While(cond, body, t.loc)

        if self.accept("KW", "for"):
            self.eat("PUNCT", "(")

            init: Optional[Stmt] = None
            if self.match("KW", "int"):
                init = self.parse_declarators(self.eat("KW", "int"))
            elif not self.accept("PUNCT", ";"):
                e = self.parse_expr()
                self.eat("PUNCT", ";")
                init = ExprStmt(e, e.loc)

            cond: Optional[Expr] = None
            if not self.match("PUNCT", ";"):
                cond = self.parse_expr()
            self.eat("PUNCT", ";")

            post: Optional[Expr] = None
            if not self.match("PUNCT", ")"):
                post = self.parse_expr()
            self.eat("PUNCT", ")")

            body = self.parse_stmt()
            return For(init, cond, post, body, t.loc)

        if t.kind == "KW" and t.value in RESERVED:
            raise ParseError("statement", f"unsupported statement {t.value!r}", t.loc)

        if self.match("KW", "int"):
            return self.parse_declarators(self.eat("KW", "int"))

        e = self.parse_expr()
        self.eat("PUNCT", ";")
        return ExprStmt(e, t.loc)

    # ---------- expressions ----------

    PRECEDENCE = {
        "||": 1,
        "&&": 2,
        "==": 3, "!=": 3,
        "<": 4, "<=": 4, ">": 4, ">=": 4,
        "+": 5, "-": 5,
        "*": 6, "/": 6, "%": 6,
    }

    def parse_expr(self, min_prec: int = 0) -> Expr:
        with self.nested("expression"):
            return self._parse_expr(min_prec)

    def _parse_expr(self, min_prec: int) -> Expr:
        e = self.parse_unary()

        while True:
            t = self.cur()

            if t.kind == "OP" and t.value == "=" and min_prec <= 0:
                if not is_lvalue(e):
                    raise ParseError("lvalue on the left of '='", "non-assignable expression", t.loc)
                self.eat("OP", "=")
                rhs = self.parse_expr(0)
                e = Assign(e, rhs, t.loc)
                continue

            if t.kind != "OP" or t.value not in self.PRECEDENCE:
                break

            prec = self.PRECEDENCE[t.value]
            if prec < min_prec:
                break

            op = t.value
            self.eat("OP", op)
            rhs = self.parse_expr(prec + 1)
            e = Binary(op, e, rhs, t.loc)

        return e

    def parse_unary(self) -> Expr:
        # prefix position: `*` is a dereference and `&` takes an address
        t = self.cur()
        if (t.kind == "OP" and t.value in ("-", "!", "*")) or (t.kind == "PUNCT" and t.value == "&"):
            self.i += 1
            with self.nested("expression"):
                rhs = self.parse_unary()
            return Unary(t.value, rhs, t.loc)
        return self.parse_primary()

    def parse_primary(self) -> Expr:
        t = self.cur()
        if t.kind == "NUMBER":
            self.eat("NUMBER")
            e: Expr = Num(int(t.value), t.loc)
        elif t.kind == "ID":
            name = self.eat("ID").value
            if self.accept("PUNCT", "("):
                args: List[Expr] = []
                if not self.match("PUNCT", ")"):
                    while True:
                        args.append(self.parse_expr())
                        if not self.accept("PUNCT", ","):
                            break
                self.eat("PUNCT", ")")
                e = Call(name, args, t.loc)
            else:
                e = Var(name, t.loc)
        elif self.accept("PUNCT", "("):
            e = self.parse_expr()
            self.eat("PUNCT", ")")
        else:
            self.fail("expression")
        # postfix []
        while self.match("PUNCT", "["):
            lb = self.eat("PUNCT", "[")
            idx = self.parse_expr()
            self.eat("PUNCT", "]")
            e = Index(e, idx, lb.loc)
        return e

def parse(tokens: Iterable[Tok]) -> Program:
    with recursion_limit(FRONT_END_RECURSION):
        return Parser(tokens).parse_program()


# ----------------------------
# Semantic checker
# ----------------------------

class Scope:
    def __init__(self, parent: Optional[Scope] = None):
        self.parent = parent
        self.level = parent.level + 1 if parent else 0
        self.names: Dict[str, Union[Symbol, FuncSymbol]] = {}

    def lookup(self, name: str) -> Optional[Union[Symbol, FuncSymbol]]:
        s: Optional[Scope] = self
        while s is not None:
            if name in s.names:
                return s.names[name]
            s = s.parent
        return None

def is_constant(e: Expr) -> bool:
    if isinstance(e, Num):
        return True
    if isinstance(e, Unary):
        return e.op in ("-", "!") and is_constant(e.rhs)
    if isinstance(e, Binary):
        return is_constant(e.lhs) and is_constant(e.rhs)
    return False

class Checker:
    """Resolves names, assigns a type to every expression and enforces the typing rules.

    The AST is annotated in place: `Var.sym`, `VarDecl.sym`, `Param.sym`,
    `Call.func` and `Expr.ty` are filled in, every function gets its frame
    layout in `FuncDef.frame`, and the program gets its globals in
    `Program.storage` and its entry point in `Program.entry`.
    """

    def __init__(self):
        self.globals = Scope()
        self.scope = self.globals
        self.func: Optional[FuncSymbol] = None
        self.frame: List[Symbol] = []
        self.returns = 0

    def check(self, prog: Program) -> Program:
        self.globals = self.scope = Scope()
        prog.storage = []
        for item in prog.items:
            try:
                if isinstance(item, FuncDef):
                    self.check_func(item)
                else:
                    self.frame = prog.storage
                    self.check_decl(item, global_=True)
            except RecursionError:
                raise SemanticError("nested too deeply to check", item.loc) from None

        main = self.globals.names.get("main")
        if not isinstance(main, FuncSymbol) or main.defn is None:
            raise MissingMain("program does not define 'main'", prog.loc)
        if main.ret != INT or main.params:
            raise TypeMismatch("'main' must be declared as 'int main(void)'", main.loc)
        for sym in self.globals.names.values():
            if isinstance(sym, FuncSymbol) and sym.defn is None and sym.called_at is not None:
                raise UndeclaredIdentifier(f"function {sym.name!r} is declared but never defined", sym.called_at)
        prog.entry = main
        return prog

    # ---------- scopes ----------

    def push(self) -> None:
        self.scope = Scope(self.scope)

    def pop(self) -> None:
        self.scope = self.scope.parent

    def declare(self, name: str, ty: CType, loc: Loc) -> Symbol:
        if name in self.scope.names:
            raise Redeclaration(f"{name!r} is already declared in this scope", loc)
        sym = Symbol(name, ty, self.scope.level, len(self.frame), loc)
        self.frame.append(sym)
        self.scope.names[name] = sym
        return sym

    # ---------- declarations ----------

    def check_func(self, f: FuncDef) -> None:
        params = [p.ty for p in f.params]
        existing = self.globals.names.get(f.name)
        if existing is None:
            fs = FuncSymbol(f.name, f.ret, params, f.loc)
            self.globals.names[f.name] = fs
        elif not isinstance(existing, FuncSymbol):
            raise Redeclaration(f"{f.name!r} is already declared as a variable", f.loc)
        else:
            fs = existing
            if len(fs.params) != len(params):
                raise ArityMismatch(
                    f"{f.name!r} was declared with {len(fs.params)} parameter(s), here with {len(params)}", f.loc)
            if fs.params != params or fs.ret != f.ret:
                raise TypeMismatch(f"conflicting types for {f.name!r}", f.loc)
            if f.body is not None and fs.defn is not None:
                raise Redeclaration(f"redefinition of function {f.name!r}", f.loc)
        f.sym = fs
        if f.body is None:
            return

        fs.defn = f
        self.func = fs
        self.frame = []
        self.returns = 0
        self.push()
        for p in f.params:
            p.sym = self.declare(p.name, p.ty, p.loc)
        # parameters and the outermost block share one scope
        for st in f.body.stmts:
            self.check_stmt(st)
        self.pop()
        f.frame = self.frame
        if f.ret == INT and self.returns == 0:
            raise MissingReturn(f"function {f.name!r} never returns a value", f.loc)
        self.func = None

    def check_decl(self, st: DeclStmt, global_: bool = False) -> None:
        for d in st.decls:
            ty = d.ty
            if ty.kind == "array":
                if ty.size is None:
                    if not isinstance(d.init, InitList):
                        raise InvalidArraySize(f"array {d.name!r} needs a size or an initializer", d.loc)
                    ty = d.ty = array_of(len(d.init.items))
                if ty.size <= 0:
                    raise InvalidArraySize(f"size of array {d.name!r} must be positive, got {ty.size}", d.loc)
            if d.init is not None:
                self.check_init(d, ty, global_)
            d.sym = self.declare(d.name, ty, d.loc)

    def check_init(self, d: VarDecl, ty: CType, global_: bool) -> None:
        if isinstance(d.init, InitList):
            if ty.kind != "array":
                raise TypeMismatch(f"brace initializer for non-array {d.name!r}", d.init.loc)
            if len(d.init.items) > ty.size:
                raise TypeMismatch(f"too many initializers for {d.name!r} ({len(d.init.items)} > {ty.size})",
                                   d.init.loc)
            exprs = d.init.items
            for e in exprs:
                if self.value(e) != INT:
                    raise TypeMismatch("array element initializer must be an int", e.loc)
        else:
            if ty.kind == "array":
                raise TypeMismatch(f"array {d.name!r} must be initialized with a brace list", d.init.loc)
            exprs = [d.init]
            vt = self.value(d.init)
            if vt != ty:
                raise TypeMismatch(f"cannot initialize {d.name!r} of type {ty} with a value of type {vt}",
                                   d.init.loc)
        if global_:
            for e in exprs:
                if not is_constant(e):
                    raise TypeMismatch(f"initializer of global {d.name!r} is not a constant", e.loc)

    # ---------- statements ----------

    def check_body(self, st: Stmt) -> None:
        self.push()
        self.check_stmt(st)
        self.pop()

    def check_cond(self, e: Expr) -> None:
        t = self.value(e)
        if t not in (INT, PTR):
            raise TypeMismatch(f"condition of type {t} is not a scalar", e.loc)

    def check_stmt(self, st: Stmt) -> None:
        if isinstance(st, Block):
            self.push()
            for s in st.stmts:
                self.check_stmt(s)
            self.pop()
        elif isinstance(st, DeclStmt):
            self.check_decl(st)
        elif isinstance(st, ExprStmt):
            self.expr(st.expr)
        elif isinstance(st, Return):
            self.returns += 1
            if self.func.ret == VOID:
                if st.expr is not None:
                    raise TypeMismatch(f"void function {self.func.name!r} returns a value", st.loc)
            elif st.expr is None:
                raise TypeMismatch(f"function {self.func.name!r} must return a value", st.loc)
            elif self.value(st.expr) != INT:
                raise TypeMismatch(f"function {self.func.name!r} must return an int", st.expr.loc)
        elif isinstance(st, If):
            self.check_cond(st.cond)
            self.check_body(st.then)
            if st.other is not None:
                self.check_body(st.other)
        elif isinstance(st, While):
            self.check_cond(st.cond)
            self.check_body(st.body)
        elif isinstance(st, For):
            self.push()
            if st.init is not None:
                self.check_stmt(st.init)
            if st.cond is not None:
                self.check_cond(st.cond)
            if st.post is not None:
                self.expr(st.post)
            self.check_body(st.body)
            self.pop()
        else:
            raise TypeError(f"unsupported statement node: {type(st).__name__}")

    # ---------- expressions ----------

    def expr(self, e: Expr) -> CType:
        e.ty = self._expr(e)
        return e.ty

    def value(self, e: Expr) -> CType:
        """Type of `e` used as a value: arrays decay, void is rejected."""
        ty = self.expr(e)
        if ty == VOID:
            raise TypeMismatch("void value used in an expression", e.loc)
        return ty.decay()

    def _expr(self, e: Expr) -> CType:
        if isinstance(e, Num):
            return INT

        if isinstance(e, Var):
            sym = self.scope.lookup(e.name)
            if sym is None:
                raise UndeclaredIdentifier(f"{e.name!r} is not declared", e.loc)
            if isinstance(sym, FuncSymbol):
                raise TypeMismatch(f"function {e.name!r} used as a value", e.loc)
            e.sym = sym
            return sym.ty

        if isinstance(e, Unary):
            if e.op == "&":
                t = self.expr(e.rhs)
                if not is_lvalue(e.rhs) or t != INT:
                    raise TypeMismatch(f"cannot take the address of an expression of type {t}", e.loc)
                return PTR
            t = self.value(e.rhs)
            if e.op == "*":
                if t != PTR:
                    raise TypeMismatch(f"cannot dereference a value of type {t}", e.loc)
                return INT
            if e.op == "-" and t != INT:
                raise TypeMismatch(f"cannot negate a value of type {t}", e.loc)
            return INT

        if isinstance(e, Binary):
            lt = self.value(e.lhs)
            rt = self.value(e.rhs)
            op = e.op
            if op in ("&&", "||"):
                return INT
            if op == "+":
                if lt == INT and rt == INT:
                    return INT
                if {lt, rt} == {INT, PTR}:
                    return PTR
            elif op == "-":
                if rt == INT:
                    return lt
                if lt == PTR:
                    return INT
            elif op in ("*", "/", "%"):
                if lt == INT and rt == INT:
                    return INT
            elif lt == rt:
                return INT
            raise TypeMismatch(f"invalid operands to '{op}' ({lt} and {rt})", e.loc)

        if isinstance(e, Index):
            bt = self.value(e.base)
            if bt != PTR:
                raise TypeMismatch(f"subscripted value of type {bt} is not an array or pointer", e.loc)
            if self.value(e.index) != INT:
                raise TypeMismatch("array subscript is not an int", e.index.loc)
            return INT

        if isinstance(e, Assign):
            rt = self.value(e.rhs)
            tt = self.expr(e.target)
            if tt.kind == "array":
                raise TypeMismatch(f"cannot assign to array of type {tt}", e.loc)
            if tt != rt:
                raise TypeMismatch(f"cannot assign a value of type {rt} to {tt}", e.loc)
            return tt

        if isinstance(e, Call):
            fs = self.scope.lookup(e.name)
            if fs is None:
                raise UndeclaredIdentifier(f"function {e.name!r} is not declared", e.loc)
            if not isinstance(fs, FuncSymbol):
                raise TypeMismatch(f"{e.name!r} is not a function", e.loc)
            if len(e.args) != len(fs.params):
                raise ArityMismatch(
                    f"{e.name!r} expects {len(fs.params)} argument(s), got {len(e.args)}", e.loc)
            for arg, pt in zip(e.args, fs.params):
                at = self.value(arg)
                if at != pt:
                    raise TypeMismatch(f"argument of type {at} passed to a parameter of type {pt}", arg.loc)
            e.func = fs
            if fs.called_at is None:
                fs.called_at = e.loc
            return fs.ret

        raise TypeError(f"unsupported expression node: {type(e).__name__}")

def check(prog: Program) -> Program:
    with recursion_limit(FRONT_END_RECURSION):
        return Checker().check(prog)


# ----------------------------
# Evaluator
# ----------------------------

@dataclass
class Limits:
    max_depth: int = 1000               # active frames
    max_steps: Optional[int] = None     # statements plus loop tests; None = unlimited

# rough upper bound of interpreter frames one C call nests on the host stack
HOST_FRAMES_PER_CALL = 24

@dataclass(eq=False)
class Region:
    base: int
    count: int
    owner: str
    alive: bool = True

@dataclass(frozen=True)
class Pointer:
    region: Region
    index: int      # absolute store index

    def __str__(self) -> str:
        return f"&{self.region.owner}[{self.index - self.region.base}]"

# a cell or value: an int, a Pointer, or None for the null pointer
Value = Union[int, Pointer, None]

class Store:
    """Flat memory of cells; every variable owns one contiguous region of it."""

    def __init__(self):
        self.cells: List[Value] = []
        self.regions: List[Region] = []

    def alloc(self, ty: CType, owner: str) -> Region:
        region = Region(len(self.cells), ty.cells, owner)
        self.cells.extend([None if ty == PTR else 0] * ty.cells)
        self.regions.append(region)
        return region

    def mark(self) -> int:
        return len(self.regions)

    def release(self, mark: int) -> None:
        dead = self.regions[mark:]
        if not dead:
            return
        for region in dead:
            region.alive = False
        del self.regions[mark:]
        del self.cells[dead[0].base:]

@dataclass
class Frame:
    func: FuncDef
    regions: List[Region]

class _Return:
    __slots__ = ("value",)

    def __init__(self, value: Value):
        self.value = value

def wrap32(v: int) -> int:
    return (v - INT_MIN) % 2**32 + INT_MIN

ARITH = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
}

COMPARE = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}

class Interpreter:
    def __init__(self, prog: Program, limits: Optional[Limits] = None):
        self.prog = prog
        self.limits = limits or Limits()
        self.reset()

    def reset(self) -> None:
        self.store = Store()
        self.stack: List[Frame] = []
        self.globals: List[Region] = []
        self.steps = 0

    def run(self) -> int:
        """Run `main` from a fresh store; calling it again starts over."""
        if self.prog.entry is None:
            check(self.prog)
        main = self.prog.entry.defn
        self.reset()
        try:
            with recursion_limit(self.limits.max_depth * HOST_FRAMES_PER_CALL + 1000):
                self.init_globals()
                result = self.call(main, [], main.loc)
        except RecursionError:
            raise StackOverflow("host evaluation stack exhausted", main.loc) from None
        if result is None:
            raise NoReturnFromMain("'main' finished without returning a value", main.loc, "main")
        return result

    def init_globals(self) -> None:
        for sym in self.prog.storage:
            self.globals.append(self.store.alloc(sym.ty, sym.name))
        for st in self.prog.decls:
            self.exec_decl(st)

    # ---------- frames ----------

    def current(self) -> Optional[str]:
        return self.stack[-1].func.name if self.stack else None

    def region_of(self, sym: Symbol) -> Region:
        if sym.is_global:
            return self.globals[sym.slot]
        return self.stack[-1].regions[sym.slot]

    def call(self, f: FuncDef, args: List[Value], loc: Loc) -> Value:
        if len(self.stack) >= self.limits.max_depth:
            raise StackOverflow(f"call depth exceeds {self.limits.max_depth} frames", loc, f.name)
        mark = self.store.mark()
        regions = [self.store.alloc(sym.ty, sym.name) for sym in f.frame]
        self.stack.append(Frame(f, regions))
        try:
            for p, v in zip(f.params, args):
                self.store.cells[regions[p.sym.slot].base] = v
            for st in f.body.stmts:
                flow = self.exec_stmt(st)
                if flow is not None:
                    return flow.value
            return None
        finally:
            self.stack.pop()
            self.store.release(mark)

    def tick(self, loc: Loc) -> None:
        self.steps += 1
        if self.limits.max_steps is not None and self.steps > self.limits.max_steps:
            raise StepLimitExceeded(f"more than {self.limits.max_steps} steps executed", loc, self.current())

    # ---------- statements ----------

    def exec_stmt(self, st: Stmt) -> Optional[_Return]:
        self.tick(st.loc)

        if isinstance(st, ExprStmt):
            self.eval(st.expr, used=False)
            return None

        if isinstance(st, DeclStmt):
            self.exec_decl(st)
            return None

        if isinstance(st, Return):
            return _Return(None if st.expr is None else self.eval(st.expr))

        if isinstance(st, Block):
            for s in st.stmts:
                flow = self.exec_stmt(s)
                if flow is not None:
                    return flow
            return None

        if isinstance(st, If):
            if self.truthy(self.eval(st.cond)):
                return self.exec_stmt(st.then)
            if st.other is not None:
                return self.exec_stmt(st.other)
            return None

        if isinstance(st, While):
            while self.test(st.cond, st.loc):
                flow = self.exec_stmt(st.body)
                if flow is not None:
                    return flow
            return None

        if isinstance(st, For):
            if st.init is not None:
                self.exec_stmt(st.init)
            while self.test(st.cond, st.loc):
                flow = self.exec_stmt(st.body)
                if flow is not None:
                    return flow
                if st.post is not None:
                    self.eval(st.post, used=False)
            return None

        raise ExecutionError(f"unsupported statement node: {type(st).__name__}", st.loc, self.current())

    def test(self, cond: Optional[Expr], loc: Loc) -> bool:
        self.tick(loc)
        return cond is None or self.truthy(self.eval(cond))

    def exec_decl(self, st: DeclStmt) -> None:
        for d in st.decls:
            region = self.region_of(d.sym)
            if isinstance(d.init, InitList):
                values = [self.eval(e) for e in d.init.items]
                values += [0] * (region.count - len(values))
                self.store.cells[region.base:region.base + region.count] = values
            elif d.sym.ty.kind == "array":
                continue  # arrays keep their cells
            elif d.init is None:
                self.store.cells[region.base] = None if d.sym.ty == PTR else 0
            else:
                self.store.cells[region.base] = self.eval(d.init)

    # ---------- memory ----------

    def access(self, p: Value, loc: Loc) -> int:
        """Validate a load/store through `p` and return the store index."""
        if p is None:
            raise InvalidPointerOp("dereference of a null pointer", loc, self.current())
        r = p.region
        if not r.alive:
            raise OutOfBounds(f"access through a pointer into {r.owner!r}, whose frame has returned",
                              loc, self.current())
        if not r.base <= p.index < r.base + r.count:
            raise OutOfBounds(f"index {p.index - r.base} is outside {r.owner!r} of {r.count} element(s)",
                              loc, self.current())
        return p.index

    def load(self, p: Value, loc: Loc) -> Value:
        return self.store.cells[self.access(p, loc)]

    def store_at(self, p: Value, v: Value, loc: Loc) -> None:
        self.store.cells[self.access(p, loc)] = v

    def offset(self, p: Value, k: int, loc: Loc) -> Pointer:
        if p is None:
            raise InvalidPointerOp("arithmetic on a null pointer", loc, self.current())
        return Pointer(p.region, p.index + k)

    def address(self, e: Expr) -> Pointer:
        if isinstance(e, Var):
            region = self.region_of(e.sym)
            return Pointer(region, region.base)
        if isinstance(e, Index):
            return self.offset(self.eval(e.base), self.eval(e.index), e.loc)
        if isinstance(e, Unary) and e.op == "*":
            p = self.eval(e.rhs)
            if p is None:
                raise InvalidPointerOp("dereference of a null pointer", e.loc, self.current())
            return p
        raise ExecutionError(f"expression is not an lvalue: {type(e).__name__}", e.loc, self.current())

    # ---------- expressions ----------

    @staticmethod
    def truthy(v: Value) -> bool:
        return v is not None and v != 0

    def eval(self, e: Expr, used: bool = True) -> Value:
        if isinstance(e, Num):
            return e.value

        if isinstance(e, Var):
            region = self.region_of(e.sym)
            if e.sym.ty.kind == "array":
                return Pointer(region, region.base)   # decays to a pointer to its first element
            return self.store.cells[region.base]

        if isinstance(e, Assign):
            v = self.eval(e.rhs)
            self.store_at(self.address(e.target), v, e.loc)
            return v

        if isinstance(e, Index):
            return self.load(self.address(e), e.loc)

        if isinstance(e, Unary):
            if e.op == "&":
                return self.address(e.rhs)
            v = self.eval(e.rhs)
            if e.op == "*":
                return self.load(v, e.loc)
            if e.op == "-":
                return wrap32(-v)
            if e.op == "!":
                return 0 if self.truthy(v) else 1
            raise ExecutionError(f"unsupported unary {e.op}", e.loc, self.current())

        if isinstance(e, Binary):
            if e.op == "&&":
                return 1 if self.truthy(self.eval(e.lhs)) and self.truthy(self.eval(e.rhs)) else 0
            if e.op == "||":
                return 1 if self.truthy(self.eval(e.lhs)) or self.truthy(self.eval(e.rhs)) else 0
            a = self.eval(e.lhs)
            b = self.eval(e.rhs)
            if e.lhs.ty.decay() == PTR or e.rhs.ty.decay() == PTR:
                return self.pointer_binary(e, a, b)
            return self.int_binary(e.op, a, b, e.loc)

        if isinstance(e, Call):
            args = [self.eval(arg) for arg in e.args]
            result = self.call(e.func.defn, args, e.loc)
            if result is None and used:
                raise MissingReturnValue(f"{e.name!r} ended without returning a value", e.loc, self.current())
            return result

        raise ExecutionError(f"unsupported expression node: {type(e).__name__}", e.loc, self.current())

    def int_binary(self, op: str, a: int, b: int, loc: Loc) -> int:
        if op in ("/", "%"):
            if b == 0:
                raise DivisionByZero(f"'{op}' by zero", loc, self.current())
            # C truncates toward zero; the remainder takes the sign of the dividend
            q = abs(a) // abs(b)
            if (a < 0) != (b < 0):
                q = -q
            return wrap32(q) if op == "/" else wrap32(a - b * q)
        if op in COMPARE:
            return int(COMPARE[op](a, b))
        return wrap32(ARITH[op](a, b))

    def pointer_binary(self, e: Binary, a: Value, b: Value) -> Value:
        op = e.op
        lptr = e.lhs.ty.decay() == PTR
        rptr = e.rhs.ty.decay() == PTR
        if op == "+":
            return self.offset(a, b, e.loc) if lptr else self.offset(b, a, e.loc)
        if op == "-" and not rptr:
            return self.offset(a, -b, e.loc)
        if op in ("==", "!="):
            return int(COMPARE[op](a, b))
        if a is None or b is None:
            raise InvalidPointerOp(f"null pointer used with '{op}'", e.loc, self.current())
        if a.region is not b.region:
            raise InvalidPointerOp(
                f"'{op}' on pointers into different objects ({a.region.owner!r} and {b.region.owner!r})",
                e.loc, self.current())
        if op == "-":
            return wrap32(a.index - b.index)
        return int(COMPARE[op](a.index, b.index))

def run(prog: Program, limits: Optional[Limits] = None) -> int:
    return Interpreter(prog, limits).run()

def execute(src: str, limits: Optional[Limits] = None) -> int:
    """Lex, parse, check and run `src`, returning the value `main` returns."""
    return run(check(parse(tokenize(src))), limits)


# ----------------------------
# Driver
# ----------------------------

HELP = """\
Usage:
  python3 cinterp.py [--tokens | --ast | --check] [-s max_steps] [-d max_depth] program.c
"""

def main(argv: List[str]) -> int:
    import getopt
    try:
        opts, args = getopt.getopt(argv[1:], "s:d:", ["tokens", "ast", "check"])
    except getopt.GetoptError as e:
        print(f"cinterp: {e}", file=sys.stderr)
        print(HELP, file=sys.stderr)
        return 2

    mode = "run"
    limits = Limits()
    for flag, val in opts:
        if flag in ("-s", "-d"):
            if not val.isdigit() or int(val) == 0:
                print(f"cinterp: {flag} expects a positive integer, got {val!r}", file=sys.stderr)
                return 2
            if flag == "-s":
                limits.max_steps = int(val)
            else:
                limits.max_depth = int(val)
        else:
            mode = flag[2:]

    if len(args) != 1:
        print(HELP, file=sys.stderr)
        return 2

    c_path = Path(args[0])
    if not c_path.exists():
        print(f"cinterp: file not found: {c_path}", file=sys.stderr)
        return 1

    src = c_path.read_text(encoding="utf-8")

    try:
        if mode == "tokens":
            for t in tokenize(src):
                print(f"{t.line}:{t.col}\t{t.kind}\t{t.value}")
            return 0
        prog = parse(tokenize(src))
        if mode == "ast":
            print(format_ast(prog))
            return 0
        check(prog)
        if mode == "check":
            print(f"{c_path}: ok", file=sys.stderr)
            return 0
        result = run(prog, limits)
    except CError as e:
        print(f"{c_path}:{e}", file=sys.stderr)
        return 1

    print(f"{c_path}: main returned {result}", file=sys.stderr)
    return result & 0xFF

def cli() -> None:
    raise SystemExit(main(sys.argv))

if __name__ == "__main__":
    cli()
