#!/usr/bin/env python
"""Apply a reviewer action to one queue record.

Examples:
    uv run python scripts/review_item.py <id> approve --by alice
    uv run python scripts/review_item.py <id> reject --by alice --reason "Not early-stage"
    uv run python scripts/review_item.py <id> request_info --by alice --notes "Team size?"
"""

import argparse
import asyncio
import sys

from curator.core.container import get_container
from curator.core.database import close_db
from curator.core.exceptions import CuratorError
from curator.core.logging import setup_logging
from curator.services.review.approval import ReviewAction


async def review(args: argparse.Namespace) -> int:
    """Apply the action and print the outcome.

    Returns:
        Process exit code
    """
    service = get_container().approval_service()
    try:
        result = await service.review(
            args.item_id,
            args.action,
            args.by,
            notes=args.notes,
            rejection_reason=args.reason,
        )
    except CuratorError as e:
        print(f"Review failed: {e.message}", file=sys.stderr)
        return 1
    finally:
        await close_db()

    print(
        f"{result.content_type.value} {result.item_id}: "
        f"{result.previous_status.value} -> {result.status.value}"
    )
    if result.production_id:
        state = "created" if result.production_created else "already existed"
        print(f"Production record {result.production_id} ({state})")
    return 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Review one queue record")
    parser.add_argument("item_id", help="Queue record id")
    parser.add_argument("action", choices=[a.value for a in ReviewAction])
    parser.add_argument("--by", required=True, help="Reviewer identifier")
    parser.add_argument("--notes", help="Reviewer notes")
    parser.add_argument("--reason", help="Rejection reason (defaults to notes)")
    args = parser.parse_args()

    setup_logging()
    sys.exit(asyncio.run(review(args)))


if __name__ == "__main__":
    main()
