"""Nullable, FIRST, FOLLOW and director sets of an ECFG.

Each analysis is a table over non-terminals, built by iterating a monotone
computation until no entry changes, and a function that evaluates any
expression against that table.
"""
import logging
from dataclasses import dataclass
from pprint import pformat
from typing import Iterator

from ell1.expression import (
    Alternation,
    Expression,
    Path,
    Repetition,
    Sequence,
    Symbol,
    display,
    to_tokens,
)
from ell1.grammar import EOF, Alternative, Grammar

log = logging.getLogger(__name__)


class Nullable:

    def __init__(self, grammar: Grammar):
        self.grammar = grammar
        self.nullable: dict[str, bool] = Nullable.build(grammar)

    def __getitem__(self, expr: Expression) -> bool:
        return Nullable.of(self.grammar, self.nullable, expr)

    @staticmethod
    def of(grammar: Grammar, table: dict[str, bool], expr: Expression) -> bool:
        if isinstance(expr, Symbol):
            return not grammar.is_terminal(expr.name) and table[expr.name]
        if isinstance(expr, Sequence):
            return all(Nullable.of(grammar, table, e) for e in expr.children)
        if isinstance(expr, Alternation):
            return any(Nullable.of(grammar, table, e) for e in expr.branches)
        return True

    @staticmethod
    def build(grammar: Grammar) -> dict[str, bool]:
        nullable = {nt: False for nt in grammar.non_terminals}

        rounds = 0
        is_changing = True
        while is_changing:
            is_changing = False
            rounds += 1
            for nt, expr in grammar.definitions.items():
                if nullable[nt] or expr is None:
                    continue
                if Nullable.of(grammar, nullable, expr):
                    nullable[nt] = True
                    is_changing = True

        log.debug("Nullable converged after %d rounds", rounds)
        return nullable

    def __str__(self) -> str:
        return pformat(self.nullable)


class First:

    def __init__(self, grammar: Grammar, nullable: Nullable):
        self.grammar = grammar
        self.nullable = nullable
        self.first: dict[str, set[str]] = First.build(grammar, nullable)

    def __getitem__(self, expr: Expression) -> set[str]:
        return First.of(self.grammar, self.nullable, self.first, expr)

    @staticmethod
    def of(
        grammar: Grammar, nullable: Nullable, table: dict[str, set[str]], expr: Expression
    ) -> set[str]:
        if isinstance(expr, Symbol):
            if grammar.is_terminal(expr.name):
                return {expr.name}
            return set(table[expr.name])
        if isinstance(expr, Repetition):
            return First.of(grammar, nullable, table, expr.body)
        if isinstance(expr, Alternation):
            first = set()
            for b in expr.branches:
                first |= First.of(grammar, nullable, table, b)
            return first

        first = set()
        for e in expr.children:
            first |= First.of(grammar, nullable, table, e)
            if not nullable[e]:
                break
        return first

    @staticmethod
    def build(grammar: Grammar, nullable: Nullable) -> dict[str, set[str]]:
        first = {nt: set() for nt in grammar.non_terminals}

        rounds = 0
        is_changing = True
        while is_changing:
            is_changing = False
            rounds += 1
            for nt, expr in grammar.definitions.items():
                if expr is None:
                    continue
                rhs = First.of(grammar, nullable, first, expr)
                is_changing = is_changing or len(rhs.difference(first[nt])) > 0
                first[nt] = first[nt] | rhs

        log.debug("First converged after %d rounds", rounds)
        return first

    def __str__(self) -> str:
        return pformat(self.first)


class Follow:
    """FOLLOW sets, plus the context follow of every node of a definition.

    The context follow of a node is the set of terminals (or `EOF`) that may
    come right after the text the node derives:

        * the root of `A`'s definition is followed by FOLLOW(A)
        * a child of a sequence by FIRST of the children after it, and by the
          sequence's own context follow when those children are nullable
        * a branch of an alternation by the alternation's context follow
        * the body of a repetition by FIRST(body), since the loop may restart,
          and by the repetition's context follow
    """

    def __init__(self, grammar: Grammar, nullable: Nullable, first: First):
        self.grammar = grammar
        self.nullable = nullable
        self.first = first
        self.follow: dict[str, set[str]] = Follow.build(grammar, nullable, first)

    def __getitem__(self, nt: str) -> set[str]:
        return self.follow[nt]

    @staticmethod
    def contexts(
        nullable: Nullable, first: First, expr: Expression, follow: set[str], path: Path = ()
    ) -> Iterator[tuple[Path, Expression, set[str]]]:
        """Yields `(path, node, context follow)` for every node, parents first."""
        yield path, expr, follow

        if isinstance(expr, Sequence):
            tails = []
            tail_first: set[str] = set()
            tail_nullable = True
            for e in reversed(expr.children):
                tails.append(tail_first | follow if tail_nullable else tail_first)
                tail_first = first[e] | tail_first if nullable[e] else first[e]
                tail_nullable = tail_nullable and nullable[e]
            tails.reverse()

            for i, (e, ctx) in enumerate(zip(expr.children, tails)):
                yield from Follow.contexts(nullable, first, e, ctx, path + (i,))
        elif isinstance(expr, Alternation):
            for i, e in enumerate(expr.branches):
                yield from Follow.contexts(nullable, first, e, follow, path + (i,))
        elif isinstance(expr, Repetition):
            ctx = first[expr.body] | follow
            yield from Follow.contexts(nullable, first, expr.body, ctx, path + (0,))

    @staticmethod
    def build(grammar: Grammar, nullable: Nullable, first: First) -> dict[str, set[str]]:
        follow = {nt: set() for nt in grammar.non_terminals}
        follow[grammar.start].add(EOF)

        rounds = 0
        is_changing = True
        while is_changing:
            is_changing = False
            rounds += 1
            for nt, expr in grammar.definitions.items():
                if expr is None:
                    continue
                for _, node, ctx in Follow.contexts(nullable, first, expr, set(follow[nt])):
                    if not isinstance(node, Symbol) or grammar.is_terminal(node.name):
                        continue
                    if not ctx <= follow[node.name]:
                        follow[node.name] |= ctx
                        is_changing = True

        log.debug("Follow converged after %d rounds", rounds)
        return follow

    def __str__(self) -> str:
        return pformat(self.follow)


@dataclass(frozen=True)
class Conflict:
    lhs: str
    path: Path
    first: str
    second: str
    terminals: frozenset[str]

    def __str__(self) -> str:
        where = f"{self.lhs} at {list(self.path)}: '{self.first}' and '{self.second}'"
        if not self.terminals:
            return f"{where} both derive ε"
        return f"{where} both start with {', '.join(sorted(self.terminals))}"


@dataclass(frozen=True)
class ChoicePoint:
    """A decision a top-down parser takes with one token of lookahead.

    An alternation chooses among its branches; a repetition chooses between
    running its body once more ("repeat") and leaving the loop ("stop").
    `deletable[i]` tells whether sibling `i` derives ε; "stop" always does.
    """

    lhs: str
    path: Path
    kind: str
    expr: Expression
    siblings: tuple[tuple[str, frozenset[str]], ...]
    deletable: tuple[bool, ...]

    def clash(self, i: int, j: int) -> bool:
        """Siblings `i` and `j` share a lookahead terminal, or both derive ε."""
        common = self.siblings[i][1] & self.siblings[j][1]
        return bool(common) or (self.deletable[i] and self.deletable[j])

    def conflicts(self) -> Iterator[Conflict]:
        for i, (label_i, director_i) in enumerate(self.siblings):
            for j in range(i + 1, len(self.siblings)):
                if self.clash(i, j):
                    label_j, director_j = self.siblings[j]
                    yield Conflict(self.lhs, self.path, label_i, label_j, director_i & director_j)

    def is_disjoint(self) -> bool:
        return next(self.conflicts(), None) is None


class Director:

    def __init__(self, grammar: Grammar, nullable: Nullable, first: First, follow: Follow):
        self.grammar = grammar
        self.nullable = nullable
        self.first = first
        self.follow = follow

    def of(self, expr: Expression, follow: set[str]) -> set[str]:
        """Director set of `expr` when it is followed by `follow`."""
        if self.nullable[expr]:
            return self.first[expr] | follow
        return self.first[expr]

    def alternatives(self, nt: str) -> dict[Alternative, set[str]]:
        alternatives = self.grammar.alternatives[nt]
        expr = self.grammar.definition(nt)

        if len(alternatives) > 1:
            branches = expr.branches
        elif alternatives:
            branches = (expr,)
        else:
            branches = ()

        return {alt: self.of(b, self.follow[nt]) for alt, b in zip(alternatives, branches)}

    def choice_points(self, nt: str) -> list[ChoicePoint]:
        expr = self.grammar.definition(nt)
        if expr is None:
            return []

        points = []
        for path, node, ctx in Follow.contexts(self.nullable, self.first, expr, self.follow[nt]):
            if isinstance(node, Alternation):
                siblings = tuple(
                    (display(to_tokens(b)), frozenset(self.of(b, ctx))) for b in node.branches
                )
                deletable = tuple(self.nullable[b] for b in node.branches)
                points.append(ChoicePoint(nt, path, "alternation", node, siblings, deletable))
            elif isinstance(node, Repetition):
                # a deletable body can also be entered on what follows the loop
                siblings = (
                    ("repeat", frozenset(self.of(node.body, ctx))),
                    ("stop", frozenset(ctx)),
                )
                deletable = (self.nullable[node.body], True)
                points.append(ChoicePoint(nt, path, "repetition", node, siblings, deletable))
        return points
