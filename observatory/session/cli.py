"""CLI for the Universal Law Observatory.

Provides commands:
- observatory run: Run research cycles and print the outcome
- observatory init-config: Write a default configuration file
- observatory generate-law: Render a discovered law into a source file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ..core.config import ObservatoryConfig, load_config, save_config
from ..core.errors import ObservatoryError
from ..laws.generator import DiscoveredLaw, LawFileGenerator
from .session import ResearchSession


def _setup_logging(config: ObservatoryConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.logging.level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=config.logging.format)


def cmd_run(args: argparse.Namespace) -> int:
    """Run research cycles."""
    config = load_config(Path(args.config) if args.config else None)
    _setup_logging(config, args.verbose)
    if args.seed is not None:
        config.session.seed = args.seed

    session = ResearchSession(config)
    reports = session.run(args.cycles, progress=not args.json)
    summary = session.summary()

    if args.json:
        print(json.dumps(summary, indent=2, default=str))
        return 0

    print(f"Ran {len(reports)} cycles in domain '{summary['domain']}'\n")

    print("HEALTH")
    for comp, health in summary["health"].items():
        alloc = summary["last_allocation"].get(comp, 0.0)
        print(f"  {comp:<16} health={health:.3f} allocation={alloc:.2f}")
    print()

    if summary["patterns"]:
        print("PATTERNS")
        for pid, conf in sorted(summary["patterns"].items(), key=lambda kv: -kv[1]):
            print(f"  {pid}: {conf:.0%}")
        print()

    latest = summary["latest_explanation"]
    if latest:
        print("LATEST EXPLANATION")
        print(latest["description"])
        print(f"  confidence: {latest['confidence']:.2f}")
        for alt in latest["alternatives"]:
            print(f"  alternative: {alt}")

    return 0


def cmd_init_config(args: argparse.Namespace) -> int:
    """Write a default configuration file."""
    path = Path(args.path)
    if path.exists() and not args.force:
        print(f"{path} already exists (use --force to overwrite)", file=sys.stderr)
        return 1
    save_config(ObservatoryConfig(), path)
    print(f"Wrote default configuration to {path}")
    return 0


def cmd_generate_law(args: argparse.Namespace) -> int:
    """Render a discovered law file."""
    config = load_config(Path(args.config) if args.config else None)
    _setup_logging(config, args.verbose)
    if args.base_path:
        config.laws.base_path = args.base_path

    generator = LawFileGenerator(config.laws)
    path = generator.generate(DiscoveredLaw(args.name, args.domain, args.formula))
    print(path)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="observatory",
        description="Universal Law Observatory research cycles",
    )
    parser.add_argument("--config", help="Path to observatory YAML config")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    run = sub.add_parser("run", help="Run research cycles")
    run.add_argument("-n", "--cycles", type=int, default=10)
    run.add_argument("--seed", type=int, default=None)
    run.add_argument("--json", action="store_true", help="Print summary as JSON")
    run.set_defaults(func=cmd_run)

    init = sub.add_parser("init-config", help="Write a default config file")
    init.add_argument("path", nargs="?", default="observatory.yaml")
    init.add_argument("--force", action="store_true")
    init.set_defaults(func=cmd_init_config)

    law = sub.add_parser("generate-law", help="Generate a discovered law file")
    law.add_argument("name")
    law.add_argument("domain")
    law.add_argument("--formula", default="")
    law.add_argument("--base-path", default=None)
    law.set_defaults(func=cmd_generate_law)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except ObservatoryError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
