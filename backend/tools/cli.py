"""CLI for the audit trail demo and maintenance commands."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)-5.5s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


async def demo_command(delay: float) -> int:
    """Run the order / item / product scenario and print every step."""
    from tools.demo import format_steps, run_demo

    steps = await run_demo(delay=delay)
    print(format_steps(steps))
    return 0


async def backfill_command(apply: bool) -> int:
    """Recompute dependents stamps in the configured database."""
    from app.models.base import async_session_maker, bubbling_policy
    from tools.backfill_dependents import backfill

    if not apply:
        logger.info("Running in dry-run mode (pass --apply to commit)")
    await backfill(async_session_maker, bubbling_policy, dry_run=not apply)
    return 0


def rules_command() -> int:
    """Print the configured bubbling rules."""
    from app.models.base import bubbling_policy

    if not len(bubbling_policy):
        print("No bubbling rules configured")
        return 0
    for child, parent in sorted(bubbling_policy.rules):
        print(f"{child} -> {parent}")
    return 0


def main() -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(description="Bubbling audit trail CLI")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Demo command
    demo_parser = subparsers.add_parser(
        "demo", help="Run the order/item/product scenario in memory"
    )
    demo_parser.add_argument(
        "--delay",
        type=float,
        default=0.1,
        help="Seconds between steps (default: 0.1)",
    )

    # Backfill command
    backfill_parser = subparsers.add_parser(
        "backfill", help="Recompute last_modified_with_dependents for existing rows"
    )
    backfill_parser.add_argument(
        "--apply",
        action="store_true",
        help="Commit changes (default: dry-run)",
    )

    # Rules command
    subparsers.add_parser("rules", help="List configured bubbling rules")

    args = parser.parse_args()

    if args.command == "demo":
        return asyncio.run(demo_command(delay=args.delay))

    elif args.command == "backfill":
        return asyncio.run(backfill_command(apply=args.apply))

    elif args.command == "rules":
        return rules_command()

    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
