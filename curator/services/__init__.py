"""Services layer for Curator.

Services implement business logic and orchestrate data operations.
Organized by feature:
- collector: Fetch, transform, dedup, score and enqueue
- review: Reviewer actions on queued items
"""
