"""Expression trees of production right-hand sides.

A right-hand side is authored as a flat list of tokens. Five escaped tokens
are reserved for structure, so that a terminal may literally be ``(`` or ``|``:

    ``\\(`` ``\\)``  group
    ``\\{`` ``\\}``  zero or more repetitions
    ``\\|``        alternation

`build` compiles such a list into a tree of `Symbol`, `Sequence`,
`Alternation` and `Repetition` nodes. Nodes are immutable and addressed by
their path, the tuple of child indices leading to them from the root.
"""
from dataclasses import dataclass
from typing import Iterator

from ell1.errors import ValidationError

GROUP_OPEN = "\\("
GROUP_CLOSE = "\\)"
REPEAT_OPEN = "\\{"
REPEAT_CLOSE = "\\}"
ALT = "\\|"

META_TOKENS = frozenset({GROUP_OPEN, GROUP_CLOSE, REPEAT_OPEN, REPEAT_CLOSE, ALT})

CLOSING = {GROUP_OPEN: GROUP_CLOSE, REPEAT_OPEN: REPEAT_CLOSE}

EPS = "ε"


@dataclass(frozen=True)
class Symbol:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Sequence:
    children: tuple["Expression", ...] = ()

    def __str__(self) -> str:
        return display(to_tokens(self))


@dataclass(frozen=True)
class Alternation:
    branches: tuple["Expression", ...]

    def __str__(self) -> str:
        return display(to_tokens(self))


@dataclass(frozen=True)
class Repetition:
    body: "Expression"

    def __str__(self) -> str:
        return display(to_tokens(self))


Expression = Symbol | Sequence | Alternation | Repetition
Path = tuple[int, ...]


class _Builder:

    def __init__(self, tokens: list[str]):
        self.tokens = tokens
        self.pos = 0

    def peek(self) -> str | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def parse(self) -> Expression:
        expr = self.expr()
        if self.pos < len(self.tokens):
            raise ValidationError(
                f"Unmatched '{self.tokens[self.pos]}' at position {self.pos}"
            )
        return expr

    def expr(self) -> Expression:
        start = self.pos
        branches = [self.seq()]
        while self.peek() == ALT:
            self.pos += 1
            branches.append(self.seq())

        if len(branches) == 1:
            return branches[0]

        for b in branches:
            if is_empty(b):
                raise ValidationError(
                    f"Empty alternative in {display(self.tokens[start:self.pos])!r}"
                )
        return Alternation(tuple(branches))

    def seq(self) -> Expression:
        items = []
        while (token := self.peek()) is not None:
            if token in (ALT, GROUP_CLOSE, REPEAT_CLOSE):
                break
            self.pos += 1
            if token == GROUP_OPEN:
                items.append(self.enclosed(token))
            elif token == REPEAT_OPEN:
                items.append(Repetition(self.enclosed(token)))
            else:
                items.append(Symbol(token))

        if len(items) == 1:
            return items[0]
        return Sequence(tuple(items))

    def enclosed(self, opening: str) -> Expression:
        start = self.pos - 1
        closing = CLOSING[opening]

        if self.peek() == closing:
            kind = "group" if opening == GROUP_OPEN else "repetition"
            raise ValidationError(f"Empty {kind} at position {start}")

        expr = self.expr()
        if self.peek() != closing:
            raise ValidationError(f"Unmatched '{opening}' at position {start}")
        self.pos += 1
        return expr


def build(tokens: list[str]) -> Expression:
    """Compiles a flat token list into an expression tree.

    An empty list is the empty sequence (ε).

    Raises:
        * `ValidationError` on unbalanced brackets, an empty alternative,
          an empty group or an empty repetition
    """
    return _Builder(list(tokens)).parse()


def split_alternatives(tokens: list[str]) -> list[list[str]]:
    """Splits tokens at the alternation separators of the outermost level.

    `tokens` are expected to be well-bracketed, e.g. already accepted by `build`.
    """
    alternatives = [[]]
    depth = 0
    for t in tokens:
        if t in (GROUP_OPEN, REPEAT_OPEN):
            depth += 1
        elif t in (GROUP_CLOSE, REPEAT_CLOSE):
            depth -= 1
        elif t == ALT and depth == 0:
            alternatives.append([])
            continue
        alternatives[-1].append(t)
    return alternatives


def is_empty(expr: Expression) -> bool:
    return isinstance(expr, Sequence) and not expr.children


def children(expr: Expression) -> tuple[Expression, ...]:
    if isinstance(expr, Sequence):
        return expr.children
    if isinstance(expr, Alternation):
        return expr.branches
    if isinstance(expr, Repetition):
        return (expr.body,)
    return ()


def walk(expr: Expression, path: Path = ()) -> Iterator[tuple[Path, Expression]]:
    """Yields `(path, node)` for every node, parents before children."""
    yield path, expr
    for i, child in enumerate(children(expr)):
        yield from walk(child, path + (i,))


def node_at(expr: Expression, path: Path) -> Expression:
    for i in path:
        expr = children(expr)[i]
    return expr


def symbols(expr: Expression) -> Iterator[str]:
    for _, node in walk(expr):
        if isinstance(node, Symbol):
            yield node.name


def to_tokens(expr: Expression) -> list[str]:
    """Inverse of `build`: `build(to_tokens(e)) == e`."""
    if isinstance(expr, Symbol):
        return [expr.name]
    if isinstance(expr, Repetition):
        return [REPEAT_OPEN, *to_tokens(expr.body), REPEAT_CLOSE]
    if isinstance(expr, Sequence):
        tokens = []
        for child in expr.children:
            if isinstance(child, (Sequence, Alternation)):
                tokens += [GROUP_OPEN, *to_tokens(child), GROUP_CLOSE]
            else:
                tokens += to_tokens(child)
        return tokens

    tokens = []
    for i, branch in enumerate(expr.branches):
        if i:
            tokens.append(ALT)
        if isinstance(branch, Alternation):
            tokens += [GROUP_OPEN, *to_tokens(branch), GROUP_CLOSE]
        else:
            tokens += to_tokens(branch)
    return tokens


def display(tokens: list[str] | tuple[str, ...]) -> str:
    """Human-readable form of a token list: meta tokens lose their escape."""
    if not tokens:
        return EPS
    return " ".join(t[1:] if t in META_TOKENS else t for t in tokens)
