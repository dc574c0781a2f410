#!/usr/bin/env python
"""Print review queue statistics and the top pending items.

Run with: uv run python scripts/queue_status.py [--type project] [--limit 10]
"""

import argparse
import asyncio

from curator.core.container import get_container
from curator.core.database import close_db
from curator.core.logging import setup_logging
from curator.models.content import ContentType


async def show(content_type: ContentType | None, limit: int) -> None:
    """Print counts per type and status, then the highest-scored pending items."""
    queue_manager = get_container().queue_manager()
    try:
        status = await queue_manager.status()
        pending = await queue_manager.get_pending(content_type, limit=limit)
    finally:
        await close_db()

    print("\n" + "=" * 60)
    print("QUEUE STATUS")
    print("=" * 60)
    print(f"   Total queued: {status.total}")
    print(f"   In production: {status.production_total}")
    if status.last_enqueued_at:
        print(f"   Last enqueued: {status.last_enqueued_at.isoformat()}")

    for name, stats in status.by_type.items():
        counts = ", ".join(f"{k}={v}" for k, v in sorted(stats.by_status.items())) or "empty"
        print(f"   - {name}: {counts}")

    print("\n   Pending review:")
    if not pending:
        print("   (none)")
    for i, item in enumerate(pending, 1):
        print(f"   {i}. [{item.score}] {item.content_type.value:8} {item.title[:60]}")
        print(f"      id={item.id} status={item.status.value} source={item.source}")


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Show review queue status")
    parser.add_argument(
        "--type",
        choices=[t.value for t in ContentType],
        help="Only list pending items of this content type",
    )
    parser.add_argument("--limit", type=int, default=10, help="Pending items to list")
    args = parser.parse_args()

    setup_logging()
    asyncio.run(show(ContentType(args.type) if args.type else None, args.limit))


if __name__ == "__main__":
    main()
