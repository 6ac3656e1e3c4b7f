import logging
from functools import cached_property
from typing import Self

from ell1.analysis import ChoicePoint, Conflict, Director, First, Follow, Nullable
from ell1.errors import QueryError, ValidationError
from ell1.expression import Expression, build, symbols as symbols_of
from ell1.grammar import Alternative, Grammar

log = logging.getLogger(__name__)


class Engine:
    """Checks whether an ECFG is ELL(1) and answers the queries behind it.

    The grammar is validated once, here; every analysis table is computed on
    first use and kept for the lifetime of the instance. Editing a grammar
    means building a new `Engine`.

    Args:
        * `terminals` - terminal symbols
        * `non_terminals` - non-terminal symbols
        * `productions` - `{"lhs": str, "rhs": [str]}` mappings, `(lhs, rhs)`
                          pairs or `Production`s. `rhs` may use the escaped
                          meta tokens `\\(`, `\\)`, `\\{`, `\\}` and `\\|`
        * `start_symbol` - a declared non-terminal

    Example:
        >>> engine = Engine(
        ...     terminals=["+", "*", "i", "(", ")"],
        ...     non_terminals=["E", "T", "F"],
        ...     productions=[
        ...         {"lhs": "E", "rhs": ["T", "\\\\{", "+", "T", "\\\\}"]},
        ...         {"lhs": "T", "rhs": ["F", "\\\\{", "*", "F", "\\\\}"]},
        ...         {"lhs": "F", "rhs": ["(", "E", ")", "\\\\|", "i"]},
        ...     ],
        ...     start_symbol="E",
        ... )
        >>> engine.is_ell1()
        True
    """

    def __init__(
        self,
        terminals: list[str],
        non_terminals: list[str],
        productions: list,
        start_symbol: str,
    ):
        self.grammar = Grammar(terminals, non_terminals, productions, start_symbol)

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Builds an engine from the JSON layout of a grammar form:
        `terminals`, `nonTerminals`, `productions` and `startSymbol`."""
        try:
            return cls(
                terminals=data["terminals"],
                non_terminals=data["nonTerminals"],
                productions=data["productions"],
                start_symbol=data["startSymbol"],
            )
        except (KeyError, TypeError) as e:
            raise ValidationError(f"Malformed grammar description: {e!r}") from e

    def to_dict(self) -> dict:
        g = self.grammar
        return {
            "terminals": sorted(g.terminals),
            "nonTerminals": list(g.alternatives),
            "productions": [{"lhs": p.lhs, "rhs": list(p.rhs)} for p in g.productions],
            "startSymbol": g.start,
        }

    @cached_property
    def nullable(self) -> Nullable:
        return Nullable(self.grammar)

    @cached_property
    def first(self) -> First:
        return First(self.grammar, self.nullable)

    @cached_property
    def follow(self) -> Follow:
        return Follow(self.grammar, self.nullable, self.first)

    @cached_property
    def director(self) -> Director:
        return Director(self.grammar, self.nullable, self.first, self.follow)

    @cached_property
    def _choice_points(self) -> tuple[ChoicePoint, ...]:
        points = []
        for nt in self.grammar.alternatives:
            points += self.director.choice_points(nt)
        return tuple(points)

    @cached_property
    def _conflicts(self) -> tuple[Conflict, ...]:
        conflicts = tuple(c for p in self._choice_points for c in p.conflicts())
        for c in conflicts:
            log.info("ELL(1) conflict: %s", c)
        return conflicts

    def compile(self, symbols: list[str]) -> Expression:
        """Compiles an ad hoc token list the way right-hand sides are compiled."""
        try:
            expr = build(list(symbols))
        except ValidationError as e:
            raise QueryError(str(e)) from e

        for s in symbols_of(expr):
            if s not in self.grammar.terminals and s not in self.grammar.non_terminals:
                raise QueryError(f"Undeclared symbol '{s}'")
        return expr

    def check_non_terminal(self, nt: str):
        if nt not in self.grammar.non_terminals:
            raise QueryError(f"'{nt}' is not a declared non-terminal")

    def is_ell1(self) -> bool:
        return not self._conflicts

    def conflicts(self) -> list[Conflict]:
        return list(self._conflicts)

    def choice_points(self) -> list[ChoicePoint]:
        return list(self._choice_points)

    def calculate_nullable(self, symbols: list[str]) -> bool:
        return self.nullable[self.compile(symbols)]

    def calculate_first_set(self, symbols: list[str]) -> set[str]:
        return self.first[self.compile(symbols)]

    def calculate_follow_set(self, non_terminal: str) -> set[str]:
        self.check_non_terminal(non_terminal)
        return set(self.follow[non_terminal])

    def calculate_director_set(self, non_terminal: str) -> dict[Alternative, set[str]]:
        self.check_non_terminal(non_terminal)
        return self.director.alternatives(non_terminal)

    def __repr__(self) -> str:
        g = self.grammar
        return f"Engine(start={g.start!r}, non_terminals={len(g.non_terminals)}, productions={len(g.productions)})"
