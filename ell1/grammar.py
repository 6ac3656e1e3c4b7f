import logging
from dataclasses import dataclass, field
from typing import Self

from ell1.errors import ValidationError
from ell1.expression import (
    EPS,
    META_TOKENS,
    Alternation,
    Expression,
    build,
    display,
    split_alternatives,
    symbols,
)

log = logging.getLogger(__name__)

EOF = "$"
MATH_NA = "∅"

RESERVED = META_TOKENS | {EOF, EPS, MATH_NA}


@dataclass(frozen=True)
class Production:
    lhs: str
    rhs: tuple[str, ...] = ()

    @classmethod
    def coerce(cls, value) -> Self:
        """Accepts a `Production`, a `{"lhs": ..., "rhs": [...]}` mapping or a
        `(lhs, rhs)` pair."""
        if isinstance(value, cls):
            return value
        try:
            if isinstance(value, dict):
                lhs, rhs = value["lhs"], value.get("rhs", [])
            else:
                lhs, rhs = value
            if isinstance(rhs, str):
                raise TypeError("rhs must be a list of tokens")
            rhs = tuple(rhs)
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Malformed production {value!r}") from e

        if not isinstance(lhs, str) or not all(isinstance(t, str) for t in rhs):
            raise ValidationError(f"Malformed production {value!r}")
        return cls(lhs=lhs, rhs=rhs)

    def alternatives(self) -> list[tuple[str, ...]]:
        return [tuple(alt) for alt in split_alternatives(list(self.rhs))]


@dataclass(frozen=True)
class Alternative:
    """Literal top-level alternative of a non-terminal's definition.

    `index` counts alternatives across all productions of `lhs` in authoring
    order; `tokens` is kept as a label.
    """

    lhs: str
    index: int
    tokens: tuple[str, ...] = field(compare=False)

    def __str__(self) -> str:
        return f"{self.lhs} → {display(self.tokens)}"


class Grammar:
    """Validated, immutable ECFG.

    Every non-terminal has one definition: the alternation of the literal
    top-level alternatives of all its productions. A non-terminal with a single
    alternative is defined by that alternative's expression alone.
    """

    def __init__(
        self,
        terminals: list[str],
        non_terminals: list[str],
        productions: list,
        start_symbol: str,
    ):
        non_terminals = list(non_terminals)
        self.terminals: frozenset[str] = frozenset(terminals)
        self.non_terminals: frozenset[str] = frozenset(non_terminals)
        self.start = start_symbol
        self.productions: tuple[Production, ...] = tuple(
            Production.coerce(p) for p in productions
        )

        self.check_vocabulary()

        self.alternatives: dict[str, list[Alternative]] = {
            nt: [] for nt in self.ordered_non_terminals(non_terminals)
        }
        branches: dict[str, list[Expression]] = {nt: [] for nt in self.alternatives}

        for p in self.productions:
            if p.lhs not in self.non_terminals:
                raise ValidationError(f"Undeclared non-terminal '{p.lhs}' on the left-hand side")
            # validates the whole rhs, including its brackets
            build(list(p.rhs))
            for tokens in p.alternatives():
                expr = build(list(tokens))
                self.check_references(p, expr)
                self.alternatives[p.lhs].append(
                    Alternative(lhs=p.lhs, index=len(branches[p.lhs]), tokens=tokens)
                )
                branches[p.lhs].append(expr)

        self.definitions: dict[str, Expression | None] = {}
        for nt, exprs in branches.items():
            if not exprs:
                log.warning("Non-terminal '%s' has no production", nt)
                self.definitions[nt] = None
            elif len(exprs) == 1:
                self.definitions[nt] = exprs[0]
            else:
                self.definitions[nt] = Alternation(tuple(exprs))

        for nt in self.non_terminals - self.reachable():
            log.warning("Non-terminal '%s' is unreachable from '%s'", nt, self.start)

    @staticmethod
    def ordered_non_terminals(non_terminals: list[str]) -> list[str]:
        return list(dict.fromkeys(non_terminals))

    def check_vocabulary(self):
        both = self.terminals & self.non_terminals
        if both:
            raise ValidationError(
                f"Declared as both terminal and non-terminal: {', '.join(sorted(both))}"
            )

        reserved = (self.terminals | self.non_terminals) & RESERVED
        if reserved:
            raise ValidationError(f"Reserved symbols declared: {', '.join(sorted(reserved))}")

        if "" in self.terminals | self.non_terminals:
            raise ValidationError("Empty symbol name declared")

        if self.start not in self.non_terminals:
            raise ValidationError(f"Start symbol '{self.start}' is not a declared non-terminal")

    def check_references(self, production: Production, expr: Expression):
        for s in symbols(expr):
            if s not in self.terminals and s not in self.non_terminals:
                raise ValidationError(
                    f"Undeclared symbol '{s}' in the production of '{production.lhs}'"
                )

    def is_terminal(self, symbol: str) -> bool:
        return symbol in self.terminals

    def definition(self, nt: str) -> Expression | None:
        return self.definitions[nt]

    def reachable(self) -> set[str]:
        seen = {self.start}
        to_process = [self.start]
        while to_process:
            expr = self.definitions[to_process.pop()]
            if expr is None:
                continue
            for s in symbols(expr):
                if s in self.non_terminals and s not in seen:
                    seen.add(s)
                    to_process.append(s)
        return seen

    def __str__(self) -> str:
        lines = []
        for nt, alts in self.alternatives.items():
            for alt in alts:
                lines.append(str(alt))
        return "\n".join(lines)
