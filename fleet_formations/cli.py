from __future__ import annotations
import argparse, json, logging, sys
from typing import Any, Dict, List

from .assignment import assign_formation
from .catalog import Catalog, load_catalog
from .config import DEFAULT_ENV_PREFIX, load_configs
from .counters import compare_formations, counter_formations, countered_by_formations
from .damage import distribute_damage, distribute_to_buckets
from .errors import FormationError
from .models import Formation


def _parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="python -m fleet_formations.cli",
        description="Formation assignment and damage distribution"
    )
    sub = p.add_subparsers(dest="cmd")

    # assign
    asg = sub.add_parser("assign", help="Place a ship stack into a formation and print it as JSON")
    _add_common_args(asg)
    asg.add_argument("--stack", type=str, required=True, help="YAML/JSON file: ship type -> [{hp, count}, ...]")
    asg.add_argument("--formation", type=str, required=True, help="Formation type (line, box, ...)")
    asg.add_argument("--facing", type=str, default="north")

    # distribute
    dst = sub.add_parser("distribute", help="Split incoming damage across a formation")
    _add_common_args(dst)
    src = dst.add_mutually_exclusive_group(required=True)
    src.add_argument("--formation-file", type=str, default=None, help="Stored formation document (JSON/YAML)")
    src.add_argument("--stack", type=str, default=None, help="Stack file; assigned with --formation first")
    dst.add_argument("--formation", type=str, default="line")
    dst.add_argument("--damage", type=int, required=True)
    dst.add_argument("--direction", type=str, default="frontal")
    dst.add_argument("--by-bucket", action="store_true", help="Report per ship type and bucket instead of per position")

    # matchup
    mt = sub.add_parser("matchup", help="Show the counter multiplier between two formations")
    _add_common_args(mt)
    mt.add_argument("--attacker", type=str, required=True)
    mt.add_argument("--defender", type=str, required=True)

    args = p.parse_args(argv)
    if getattr(args, "cmd", None) is None:
        p.print_help()
        sys.exit(2)
    return args


def _add_common_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--config", type=str, action="append", default=[], help="Catalog override files (merged)")
    ap.add_argument("--env-prefix", type=str, default=DEFAULT_ENV_PREFIX, help="Env prefix for catalog overrides")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log overflow and rounding decisions")


def _catalog(args: argparse.Namespace) -> Catalog:
    return load_catalog(paths=args.config, env_prefix=args.env_prefix)


def _formation(args: argparse.Namespace, catalog: Catalog) -> Formation:
    if getattr(args, "formation_file", None):
        return Formation.from_dict(load_configs([args.formation_file]))
    stack = load_configs([args.stack])
    return assign_formation(stack, args.formation, catalog=catalog, facing=getattr(args, "facing", "north"))


def _emit(data: Any) -> None:
    print(json.dumps(data, indent=2))


def cmd_assign(args: argparse.Namespace) -> None:
    catalog = _catalog(args)
    _emit(_formation(args, catalog).to_dict())


def cmd_distribute(args: argparse.Namespace) -> None:
    catalog = _catalog(args)
    formation = _formation(args, catalog)
    if args.by_bucket:
        result = distribute_to_buckets(formation, args.damage, args.direction, catalog)
        out: Dict[str, Any] = {str(st): {str(i): d for i, d in b.items()} for st, b in result.items()}
    else:
        out = {str(pos): d for pos, d in distribute_damage(formation, args.damage, args.direction, catalog).items()}
    _emit(out)


def cmd_matchup(args: argparse.Namespace) -> None:
    catalog = _catalog(args)
    report = compare_formations(args.attacker, args.defender, catalog)
    print(report.summary())
    counters = ", ".join(ft.value for ft in counter_formations(args.defender, catalog)) or "none"
    weak = ", ".join(ft.value for ft in countered_by_formations(args.attacker, catalog)) or "none"
    print(f"Strong against {args.defender}: {counters}")
    print(f"{args.attacker} struggles against: {weak}")


_COMMANDS = {
    "assign": cmd_assign,
    "distribute": cmd_distribute,
    "matchup": cmd_matchup,
}


def main(argv: List[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        _COMMANDS[args.cmd](args)
    except FormationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
