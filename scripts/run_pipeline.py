#!/usr/bin/env python
"""Run one content pipeline pass.

Uses the same ContentPipeline the Celery worker runs, obtained from the
DI container.

Run with: uv run python scripts/run_pipeline.py [--sources github hackernews] [--no-ai]
"""

import argparse
import asyncio
import sys

from curator.config import PipelineConfig
from curator.core.config import get_config
from curator.core.container import get_container
from curator.core.database import close_db, init_db
from curator.core.exceptions import PipelineError
from curator.core.logging import setup_logging


async def run(args: argparse.Namespace) -> int:
    """Execute the pipeline and print the run summary.

    Returns:
        Process exit code
    """
    config = get_config()
    if args.init_db:
        await init_db()

    pipeline_config = PipelineConfig.from_config(
        config,
        sources=args.sources,
        score_threshold=args.threshold,
        batch_size=args.batch_size,
        use_ai=False if args.no_ai else None,
    )

    container = get_container()
    try:
        result = await container.pipeline().run(pipeline_config)
    except PipelineError as e:
        print(f"\nPipeline aborted: {e.message}", file=sys.stderr)
        return 1
    finally:
        await container.http_client().close()
        await close_db()

    print("\n" + "=" * 60)
    print("PIPELINE RUN COMPLETE")
    print("=" * 60)
    print(f"   Fetched:  {result.fetched}")
    print(f"   Unique:   {result.unique}")
    print(f"   Scored:   {result.scored}")
    print(f"   Stored:   {result.stored}")
    print(f"   Rejected: {result.rejected}")
    print(f"   Failed:   {result.failed}")
    print(f"   Duration: {result.duration:.1f}s")

    for stats in result.sources:
        status = "error" if stats.error else "ok"
        print(f"   - {stats.source}: {stats.stored}/{stats.fetched} stored ({status})")

    if result.errors:
        print(f"\n   Errors: {len(result.errors)}")
        for err in result.errors:
            print(f"     • {err[:100]}")
    return 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Run one content pipeline pass")
    parser.add_argument("--sources", nargs="*", help="Source names (default: all enabled)")
    parser.add_argument("--threshold", type=int, help="Minimum score to enqueue")
    parser.add_argument("--batch-size", type=int, help="Items in flight per source")
    parser.add_argument("--no-ai", action="store_true", help="Disable AI score blending")
    parser.add_argument(
        "--init-db", action="store_true", help="Create tables first (development only)"
    )
    args = parser.parse_args()

    setup_logging()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
