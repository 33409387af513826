#!/usr/bin/env python3
"""
Ideation Workshop CLI - inspect and manage persisted workshop state.

Usage:
    python -m ideation_workshop [--state-dir DIR] workshops
    python -m ideation_workshop [--state-dir DIR] ideas <workshop-id>
    python -m ideation_workshop [--state-dir DIR] summary <workshop-id>
    python -m ideation_workshop [--state-dir DIR] catalog <category>
    python -m ideation_workshop [--state-dir DIR] delete-workshop <workshop-id>

Examples:
    python -m ideation_workshop workshops
    python -m ideation_workshop summary 3f2a9c...
    python -m ideation_workshop catalog sensor
    python -m ideation_workshop --state-dir ./demo-state workshops

Environment Variables:
    IDEATION_HOME          - Base directory (default: ~/.ideation-workshop)
    IDEATION_STATE_DIR     - State directory (default: $IDEATION_HOME/state)
    IDEATION_LOG_DIR       - Log directory (default: $IDEATION_HOME/logs)
    IDEATION_CONFIG_FILE   - JSON config file (default: $IDEATION_HOME/config.json)
"""

import argparse
from typing import Tuple

from .catalog import CardCatalog
from .client import GenerativeClient
from .config import WorkshopConfig
from .display import WorkshopDisplay
from .evaluations import EvaluationStore
from .facilitator import WorkshopFacilitator
from .logger import WorkshopLogger
from .models import CardCategory
from .storage import JsonFileStorage
from .store import WorkshopStore
from .summary import build_workshop_summary


def open_session(args) -> Tuple[WorkshopStore, EvaluationStore, WorkshopFacilitator]:
    """Build stores and facilitator over the configured state directory."""
    config = WorkshopConfig(state_dir=getattr(args, "state_dir", None))
    logger = WorkshopLogger(config.log_dir, session_id="cli")
    storage = JsonFileStorage(config.state_dir)
    store = WorkshopStore(storage, logger)
    evaluations = EvaluationStore(storage, logger)
    facilitator = WorkshopFacilitator(
        store,
        evaluations,
        CardCatalog(),
        GenerativeClient(config.generation_settings(), logger),
        logger,
    )
    return store, evaluations, facilitator


def cmd_workshops(args, display: WorkshopDisplay) -> int:
    """List all workshops."""
    store, _, _ = open_session(args)
    counts = {w.id: len(store.ideas_for_workshop(w.id)) for w in store.workshops}
    display.workshops(store.workshops, counts)
    return 0


def cmd_ideas(args, display: WorkshopDisplay) -> int:
    """List ideas of a workshop."""
    store, _, _ = open_session(args)
    workshop = store.get_workshop(args.workshop_id)
    if workshop is None:
        display.error(f"Unknown workshop: {args.workshop_id}")
        return 1
    display.ideas(workshop, store.ideas_for_workshop(workshop.id))
    return 0


def cmd_summary(args, display: WorkshopDisplay) -> int:
    """Show the workshop summary."""
    store, evaluations, _ = open_session(args)
    workshop = store.get_workshop(args.workshop_id)
    if workshop is None:
        display.error(f"Unknown workshop: {args.workshop_id}")
        return 1
    display.summary(build_workshop_summary(workshop, store, evaluations))
    return 0


def cmd_catalog(args, display: WorkshopDisplay) -> int:
    """Show the cards of a catalog category."""
    category = CardCategory(args.category)
    display.catalog(category, CardCatalog().cards(category))
    return 0


def cmd_delete_workshop(args, display: WorkshopDisplay) -> int:
    """Delete a workshop with its ideas and their evaluation data."""
    store, _, facilitator = open_session(args)
    workshop = store.get_workshop(args.workshop_id)
    if workshop is None:
        display.error(f"Unknown workshop: {args.workshop_id}")
        return 1
    idea_count = len(store.ideas_for_workshop(workshop.id))
    facilitator.delete_workshop(workshop.id)
    display.success(f"Deleted workshop {workshop.name} and {idea_count} idea(s)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ideation_workshop",
        description="Ideation Workshop - Inspect workshops, ideas and card catalogs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--state-dir", "-s",
                        help="State directory (overrides IDEATION_STATE_DIR)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    workshops_parser = subparsers.add_parser("workshops", help="List workshops")
    workshops_parser.set_defaults(func=cmd_workshops)

    ideas_parser = subparsers.add_parser("ideas", help="List ideas of a workshop")
    ideas_parser.add_argument("workshop_id", help="Workshop ID")
    ideas_parser.set_defaults(func=cmd_ideas)

    summary_parser = subparsers.add_parser("summary", help="Show a workshop summary")
    summary_parser.add_argument("workshop_id", help="Workshop ID")
    summary_parser.set_defaults(func=cmd_summary)

    catalog_parser = subparsers.add_parser("catalog", help="Show a card catalog")
    catalog_parser.add_argument("category", choices=[c.value for c in CardCategory],
                                help="Card category")
    catalog_parser.set_defaults(func=cmd_catalog)

    delete_parser = subparsers.add_parser("delete-workshop", help="Delete a workshop and its ideas")
    delete_parser.add_argument("workshop_id", help="Workshop ID")
    delete_parser.set_defaults(func=cmd_delete_workshop)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args, WorkshopDisplay())
