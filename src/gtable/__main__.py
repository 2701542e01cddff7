# -------------------------------------
# gtable CLI entry point
# -------------------------------------
"""
CLI entry point for gtable.

Usage:
    python -m gtable data.csv --group-by k --sort-by v
    python -m gtable data.yml --key tables.prices --pipeline steps.yml
"""
import argparse
import logging

import yaml

from .errors import TableError
from .files import read_table
from .grouping import as_grouping, print_grouping
from .pipeline import load_pipeline, run_pipeline
from .table import Table, print_table


def _parse_filter(text: str) -> tuple[str, object]:
    col, sep, value = text.partition("=")
    if not sep or not col:
        raise argparse.ArgumentTypeError(f"filter must be COL=VALUE, got {text!r}")
    # YAML scalars give numbers and booleans their natural types
    try:
        return col, yaml.safe_load(value)
    except yaml.YAMLError as e:
        raise argparse.ArgumentTypeError(f"bad filter value in {text!r}: {e}") from e


def _main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(
        description="Grouped columnar table utilities.",
    )
    p.add_argument("path", help="Table file (.csv, .parquet, .yml/.yaml)")
    p.add_argument("--key", "-k", metavar="KEY_PATH", help="Dot-separated path of the table inside a YAML file")
    p.add_argument("--pipeline", "-p", metavar="YAML", help="YAML pipeline applied before the other options")
    p.add_argument("--filter", "-f", action="append", type=_parse_filter, metavar="COL=VALUE", help="Keep rows where COL equals VALUE (repeatable)")
    p.add_argument("--group-by", "-g", nargs="+", metavar="COL", help="Group rows by one or more columns")
    p.add_argument("--sort-by", "-s", metavar="COL", help="Sort every group by COL")
    p.add_argument("--flatten", action="store_true", help="Concatenate all groups into one table")
    p.add_argument("--groups", action="store_true", help="List group paths and row counts only")
    p.add_argument("--columns", action="store_true", help="List column names only")
    p.add_argument("--verbose", "-v", action="store_true", help="Log grouping operations to stderr")
    args = p.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        steps = load_pipeline(args.pipeline) if args.pipeline else []
        for col, value in args.filter or []:
            steps.append(("filter_eq", (col, value)))
        if args.group_by:
            steps.append(("group_by", args.group_by))
        if args.sort_by:
            steps.append(("sort_by", args.sort_by))
        if args.flatten:
            steps.append(("flatten", None))

        result = run_pipeline(read_table(args.path, args.key), steps)

        if args.columns:
            for name in result.columns():
                print(name)
        elif args.groups:
            g = as_grouping(result)
            for gid in g.groups():
                print(f"{gid}\t{len(g.table(gid))}")
        elif isinstance(result, Table):
            print_table(result)
        else:
            print_grouping(result)
    except (TableError, ValueError, FileNotFoundError, yaml.YAMLError) as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    import signal
    signal.signal(signal.SIGPIPE, signal.SIG_DFL)
    raise SystemExit(_main())
