"""Command-line front end.

    python -m ell1 grammar.json --table
    python -m ell1 --store saved.json --name arith --director F
    python -m ell1 grammar.json --first '\\{ E \\}' --follow T

Exits with 0 when the grammar is ELL(1), 1 when it is not and 2 when the
input is rejected.
"""
import argparse
import json
import logging
import sys

from ell1.engine import Engine
from ell1.errors import ECFGError
from ell1.expression import display
from ell1.report import alternatives_table, analysis_table, director_table, format_set
from ell1.storage import GrammarStore

log = logging.getLogger("ell1")


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ell1",
        description="Check whether an extended context-free grammar is ELL(1).",
    )
    parser.add_argument("grammar", nargs="?", help="JSON grammar description or saved record")
    parser.add_argument("--store", help="JSON file of saved grammars")
    parser.add_argument("--name", help="key or name of the saved grammar to load from --store")
    parser.add_argument("--save", metavar="NAME", help="save the grammar to --store under NAME")
    parser.add_argument("--nullable", metavar="TOKENS", help="is this token sequence nullable")
    parser.add_argument("--first", metavar="TOKENS", help="FIRST set of this token sequence")
    parser.add_argument("--follow", metavar="NT", help="FOLLOW set of a non-terminal")
    parser.add_argument("--director", metavar="NT", help="director sets of a non-terminal")
    parser.add_argument("--table", action="store_true", help="print the analysis tables")
    parser.add_argument("--plot", metavar="NT", help="draw the expression tree of a non-terminal")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    parser.add_argument("-q", "--quiet", action="store_true")
    return parser


def configure_logging(verbose: int, quiet: bool):
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def load_description(args) -> dict:
    if args.grammar:
        with open(args.grammar, encoding="utf-8") as f:
            data = json.load(f)
    elif args.store and args.name:
        data = GrammarStore(args.store).load(args.name)
    else:
        raise ECFGError("Give a grammar file, or --store with --name")

    # a saved record wraps the description
    if isinstance(data, dict) and "data" in data:
        data = data["data"]
    return data


def run(args) -> int:
    data = load_description(args)
    engine = Engine.from_dict(data)
    log.info("Loaded %r", engine)

    if args.save:
        if not args.store:
            raise ECFGError("--save needs --store")
        key = GrammarStore(args.store).save(args.save, engine.to_dict())
        print(f"Saved as {key}")

    ell1 = engine.is_ell1()
    print(f"ELL(1): {'yes' if ell1 else 'no'}")
    for c in engine.conflicts():
        print(f"  conflict: {c}")

    if args.nullable is not None:
        tokens = args.nullable.split()
        print(f"Nullable({display(tokens)}): {engine.calculate_nullable(tokens)}")

    if args.first is not None:
        tokens = args.first.split()
        print(f"First({display(tokens)}): {format_set(engine.calculate_first_set(tokens))}")

    if args.follow:
        print(f"Follow({args.follow}): {format_set(engine.calculate_follow_set(args.follow))}")

    if args.director:
        for alt, director in engine.calculate_director_set(args.director).items():
            print(f"Director({alt}): {format_set(director)}")

    if args.table:
        print()
        print(analysis_table(engine).to_string())
        print()
        print(alternatives_table(engine).to_string(index=False))
        print()
        print(director_table(engine).to_string(index=False))

    if args.plot:
        from ell1.plot import visualize

        engine.check_non_terminal(args.plot)
        expr = engine.grammar.definition(args.plot)
        if expr is None:
            raise ECFGError(f"'{args.plot}' has no production to draw")
        visualize(expr, title=args.plot)

    return 0 if ell1 else 1


def main(argv: list[str] | None = None) -> int:
    args = make_parser().parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    try:
        return run(args)
    except (ECFGError, KeyError, OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
