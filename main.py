#!/usr/bin/env python3
"""
Ongoing events context - developer entry point.

Loads a host dump and prints the block a dialogue prompt would receive.

Usage:
    python main.py dump.json
    python main.py dump.json --region 3 --danger --participants 12,40
    python main.py dump.json --filters filters.json --types --current-only
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from config.settings import settings
from core import EventContextException, configure_logging, get_logger
from events.service import OngoingEventsService, PromptRequest
from schemas.filter_settings import EventFilterSettings
from simulation.loader import load_simulation_file
from simulation.models import Actor, Region

logger = get_logger(__name__)


def _pick_region(regions: List[Region], region_id: Optional[int]) -> Optional[Region]:
    if region_id is not None:
        return next((r for r in regions if r.id == region_id), None)
    return next((r for r in regions if r.is_home), regions[0] if regions else None)


def _parse_ids(raw: Optional[str]) -> List[int]:
    if not raw:
        return []
    return [int(part) for part in raw.split(",") if part.strip()]


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Print the ongoing events block for a host dump")
    parser.add_argument("dump", type=Path, help="Host dump (JSON)")
    parser.add_argument("--region", "-r", type=int, help="Region id (default: first home region)")
    parser.add_argument("--danger", "-d", action="store_true", help="Treat the region as in high danger")
    parser.add_argument("--participants", "-p", help="Comma-separated actor ids in the conversation")
    parser.add_argument("--filters", "-f", type=Path, help="Filter settings (JSON)")
    parser.add_argument("--types", action="store_true", help="List filterable types instead")
    parser.add_argument("--current-only", action="store_true", help="With --types: only currently active types")
    parser.add_argument("--instances", action="store_true", help="List filterable task instances instead")

    args = parser.parse_args(argv)

    configure_logging(json_output=settings.is_production)

    filter_settings = EventFilterSettings()
    if args.filters is not None:
        try:
            filter_settings = EventFilterSettings.from_json(args.filters.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.error("Cannot load filter settings", path=str(args.filters), error=str(e))
            return 1

    try:
        adapter = load_simulation_file(args.dump)
    except (OSError, ValueError, EventContextException) as e:
        logger.error("Cannot load dump", path=str(args.dump), error=str(e))
        return 1

    region = _pick_region(adapter.regions(), args.region)
    if region is None:
        print("No matching region in dump.")
        return 1

    persisted = []
    service = OngoingEventsService(persist=persisted.append)
    session = service.start_session(adapter, filter_settings)
    if session is None:
        return 1

    try:
        if args.types:
            for entity in session.catalog.available_types(args.current_only, region, args.danger):
                print(f"{entity.category.value:<12} {entity.root_id:<40} {entity.display_name}")
            return 0

        if args.instances:
            for entity in session.catalog.current_task_instances(region):
                print(f"{entity.instance_id:<8} {entity.root_id:<40} {entity.instance_name}")
            return 0

        service.on_region_finalized(region)

        speakers = [Actor(id=actor_id) for actor_id in _parse_ids(args.participants)]
        request = PromptRequest(region=region, speakers=speakers, is_high_danger=args.danger)
        block = service.decorate_prompt(request)

        print(block if block else "(no ongoing events)")
        return 0
    finally:
        service.end_session()
        if persisted and args.filters is not None:
            args.filters.write_text(filter_settings.to_json(), encoding="utf-8")


if __name__ == "__main__":
    sys.exit(main())
