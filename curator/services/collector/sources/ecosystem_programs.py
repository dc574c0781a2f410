"""Ecosystem grant program collector.

Funding programs rarely have a machine-readable feed, so this source
reads a curated catalog: a JSON document at ``catalog_url`` when
configured, otherwise the inline ``programs`` list from the source
catalog. The JSON document may be a list of programs or an object with a
``programs`` key.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from curator.config.sources import EcosystemProgramsConfig, ProgramEntry
from curator.core.logging import get_logger
from curator.models.content import ContentType
from curator.services.collector.base import BaseSource, ContentItem
from curator.services.collector.transformer import build_item

logger = get_logger(__name__)


class EcosystemProgramsSource(BaseSource[EcosystemProgramsConfig]):
    """Curated ecosystem grant program catalog."""

    content_type = ContentType.FUNDING

    @classmethod
    def build_config(cls, overrides: dict[str, Any]) -> EcosystemProgramsConfig:
        """Build EcosystemProgramsConfig from catalog parameters."""
        return EcosystemProgramsConfig.model_validate(overrides)

    async def _fetch_raw(self) -> list[dict[str, Any]]:
        if not self._config.catalog_url:
            return [p.model_dump() for p in self._config.programs]

        logger.info("Fetching program catalog", url=self._config.catalog_url)
        response = await self._http_client.get(
            self._config.catalog_url, timeout=self._config.request_timeout
        )
        response.raise_for_status()
        payload = response.json()
        if isinstance(payload, dict):
            payload = payload.get("programs", [])
        if not isinstance(payload, list):
            raise ValueError("program catalog must be a list")
        # Keep entries raw; malformed ones are skipped individually at transform time
        return [entry for entry in payload if isinstance(entry, dict)]

    def _records(self, data: Any) -> Iterable[dict[str, Any]]:
        return data

    def _transform_record(self, record: dict[str, Any], fetched_at: datetime) -> ContentItem | None:
        program = ProgramEntry.model_validate(record)
        return build_item(
            title=program.name,
            url=program.url,
            description=program.description,
            source=self.name,
            content_type=self.content_type,
            fetched_at=fetched_at,
            metadata={
                "organization": program.organization,
                "amount_min": program.amount_min,
                "amount_max": program.amount_max,
                "deadline": program.deadline,
                "ecosystem": program.ecosystem,
                "tags": program.tags,
            },
        )


__all__ = ["EcosystemProgramsSource"]
