# -------------------------------------
# treeprofiles CLI entry point
# -------------------------------------
"""
CLI entry point.

Usage:
    python -m treeprofiles --expand "S01E{08..11}.mkv"
    python -m treeprofiles --regex "Full* S01E0[2-4].mkv"
    python -m treeprofiles --match "*.{mkv,mp4}" "episode.mkv"
    python -m treeprofiles --config profiles.yml --resolve /media/anime/x.mkv
"""
import argparse
import itertools
import logging
import sys

import yaml

from .braces import iter_braces
from .globs import MATCHERS, get_matcher, translate
from .lineage import description_matches, resolve
from .loader import load_context
from .table import print_table


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="[%(name)s] %(levelname)s: %(message)s", stream=sys.stderr)


def _main(argv=None) -> int:
    p = argparse.ArgumentParser(
        prog="treeprofiles",
        description="Brace expansion, glob matching and directory-tree profiles.",
    )
    p.add_argument("--expand", "-e", metavar="PATTERN", help="Print the brace expansion of PATTERN, one per line")
    p.add_argument("--limit", type=int, default=0, help="Limit printed expansion lines (0 = no limit)")
    p.add_argument("--regex", "-r", metavar="GLOB", help="Print the regex GLOB compiles to")
    p.add_argument("--match", "-m", nargs=2, metavar=("PATTERN", "CANDIDATE"), help="Brace-expand PATTERN and glob-match CANDIDATE (exit status 1 on no match)")
    p.add_argument("--resolve", metavar="PATH", help="Print the options applied to PATH (requires --config)")
    p.add_argument("--config", "-c", metavar="YAML", help="Profile configuration file")
    p.add_argument("--cwd", metavar="DIR", help="Directory relative paths are resolved against")
    p.add_argument("--matcher", choices=MATCHERS, help="Glob matcher backend (default: builtin)")
    p.add_argument("--sep", help="Path separator (default: /)")
    p.add_argument("--verbose", "-v", action="count", default=0, help="More log output (-v, -vv)")
    args = p.parse_args(argv)

    _setup_logging(args.verbose)

    overrides = {}
    if args.matcher:
        overrides["matcher"] = args.matcher
    if args.sep:
        overrides["sep"] = args.sep

    try:
        if args.expand is not None:
            results = iter_braces(args.expand)
            if args.limit:
                results = itertools.islice(results, args.limit)
            for s in results:
                print(s)
        elif args.regex is not None:
            print(translate(args.regex, overrides.get("sep", "/")))
        elif args.match:
            pattern, candidate = args.match
            match = get_matcher(overrides.get("matcher", "builtin"), overrides.get("sep", "/"))
            ok = description_matches(pattern, candidate, match)
            print("match" if ok else "no match")
            return 0 if ok else 1
        elif args.resolve:
            if not args.config:
                p.error("--resolve requires --config")
            ctx = load_context(args.config, **overrides)
            res = resolve(ctx, args.resolve, args.cwd)
            if res is None:
                print(f"No profile applies to: {args.resolve}")
                return 1
            print(f"parent: {res.parent}")
            print(f"path: {res.child}")
            print_table(res.to_table())
        else:
            p.print_help()
            return 1
    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
