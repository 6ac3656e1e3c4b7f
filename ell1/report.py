"""Tabular views of an engine's analyses."""
import pandas as pd

from ell1.engine import Engine
from ell1.expression import display
from ell1.grammar import MATH_NA


def format_set(s) -> str:
    if not s:
        return MATH_NA
    return "{" + ", ".join(sorted(s)) + "}"


def ordered_non_terminals(engine: Engine) -> list[str]:
    g = engine.grammar
    return [g.start] + sorted(g.non_terminals - {g.start})


def analysis_table(engine: Engine) -> pd.DataFrame:
    """Nullable, FIRST and FOLLOW of every non-terminal, start symbol first."""
    records = []
    for nt in ordered_non_terminals(engine):
        records.append(
            {
                "Non-terminal": nt,
                "Nullable": engine.nullable.nullable[nt],
                "First": engine.first.first[nt],
                "Follow": engine.follow[nt],
            }
        )

    df = pd.DataFrame.from_records(records, columns=["Non-terminal", "Nullable", "First", "Follow"])
    df = df.set_index("Non-terminal")
    df[["First", "Follow"]] = df[["First", "Follow"]].map(format_set)
    return df


def alternatives_table(engine: Engine) -> pd.DataFrame:
    """Director set of every literal alternative of every non-terminal."""
    records = []
    for nt in ordered_non_terminals(engine):
        for alt, director in engine.calculate_director_set(nt).items():
            records.append(
                {
                    "Non-terminal": nt,
                    "Alternative": display(alt.tokens),
                    "Director": format_set(director),
                }
            )
    return pd.DataFrame.from_records(records, columns=["Non-terminal", "Alternative", "Director"])


def director_table(engine: Engine) -> pd.DataFrame:
    """One row per sibling of every choice point in the grammar.

    `Conflict` is set when the sibling shares a lookahead terminal with
    another sibling of the same choice point, or when both derive ε.
    """
    records = []
    for point in engine.choice_points():
        for i, (label, director) in enumerate(point.siblings):
            clash = any(point.clash(i, j) for j in range(len(point.siblings)) if j != i)
            records.append(
                {
                    "Non-terminal": point.lhs,
                    "Path": "/".join(map(str, point.path)) or "/",
                    "Kind": point.kind,
                    "Alternative": label,
                    "Director": format_set(director),
                    "Conflict": clash,
                }
            )

    columns = ["Non-terminal", "Path", "Kind", "Alternative", "Director", "Conflict"]
    return pd.DataFrame.from_records(records, columns=columns)
