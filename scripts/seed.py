#!/usr/bin/env python3
"""
Seed Helpdesk Data
==================

Loads users, agents and sample tickets from a YAML file into the
configured store. Tickets are created through the lifecycle services, so
SLA stamps, assignment and load counters are real.

Usage:
    python scripts/seed.py [path/to/seed.yaml]
"""

import asyncio
import sys
from collections import Counter
from pathlib import Path
from typing import Any, Dict

import yaml

from helpdesk.config import UserRole, settings
from helpdesk.core import Actor
from helpdesk.main import HelpdeskContainer, lifespan
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger("scripts.seed")


def load_seed_file(path: Path) -> Dict[str, Any]:
    """Read and shape-check the seed document."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping with 'users' and 'tickets'")
    data.setdefault("users", [])
    data.setdefault("tickets", [])
    return data


async def apply_seed(container: HelpdeskContainer, data: Dict[str, Any]) -> Dict[str, int]:
    """
    Register users, then open (and optionally move) each ticket.

    Returns:
        Counts of created records by role and ticket status
    """
    summary: Counter = Counter()

    roles = {}
    for entry in data["users"]:
        user = await container.agents.register_user(entry)
        roles[user.id] = user.role
        summary[f"users.{user.role.value}"] += 1

    for entry in data["tickets"]:
        entry = dict(entry)
        owner = entry.pop("created_by")
        status = entry.pop("status", None)
        actor = Actor(user_id=owner, role=roles.get(owner, UserRole.USER))

        ticket = await container.tickets.create_ticket(entry, actor)
        if status is not None:
            ticket = await container.tickets.set_status(ticket.ticket_id, status, actor)
        summary[f"tickets.{ticket.status.value}"] += 1

    await container.dispatcher.drain()
    return dict(summary)


async def main(path: Path) -> None:
    data = load_seed_file(path)

    async with lifespan() as container:
        summary = await apply_seed(container, data)
        dashboard = await container.analytics.dashboard()

    print("Seed Data Summary:")
    print("==================")
    for key in sorted(summary):
        print(f"  {key}: {summary[key]}")
    print(f"\nTotal Tickets: {dashboard.total_tickets}")
    for status, count in sorted(dashboard.tickets_by_status.items()):
        print(f"  - {status}: {count}")


if __name__ == "__main__":
    seed_path = Path(sys.argv[1]) if len(sys.argv) > 1 else settings.seed_path
    asyncio.run(main(seed_path))
