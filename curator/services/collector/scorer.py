"""Content scoring service.

Calculates a 0-100 fit score from rule-based factors:
- Quality (substantial description, traction metrics)
- Relevance (keyword matches)
- Freshness (age of the launch/publication date)
- Completeness (URL, date, team and funding information)
- Type-specific fit adjustment (team size, funding band, founding year, deadline)

When an AI scorer is available the rule-based score is blended with the
AI sub-scores:

    final = (1 - ai_weight) * rule_score + ai_weight * mean(relevance, quality, urgency) * 10
"""

import math
import re
from datetime import UTC, datetime
from functools import cached_property
from typing import Any

from pydantic import BaseModel

from curator.config import ScoringConfig
from curator.core.exceptions import AIScoringError
from curator.core.logging import get_logger
from curator.models.content import ContentType
from curator.services.collector.ai_scorer import AIScorer
from curator.services.collector.base import (
    AIAssessment,
    ContentItem,
    ScoreComponents,
    ScoredItem,
)
from curator.services.collector.transformer import parse_datetime

logger = get_logger(__name__)

# Age (days) -> share of the freshness maximum; first matching band wins
FRESHNESS_BANDS: list[tuple[int, float]] = [
    (3, 1.0),
    (7, 0.75),
    (30, 0.5),
    (90, 0.25),
]

DATE_KEYS = ("launch_date", "published_at", "pushed_at", "created_at")
TEAM_KEYS = ("team_size", "owner", "organization", "author")
FUNDING_KEYS = ("funding_raised", "amount_min", "amount_max")
METRIC_KEYS = ("metrics", "traction", "users")
VERY_HIGH_STAR_MULTIPLIER = 10


class ScoringCriteria(BaseModel):
    """Facts extracted from an item before scoring."""

    has_title: bool
    has_description: bool
    description_length: int
    has_url: bool
    has_date: bool
    age_days: float | None
    has_team: bool
    has_funding: bool
    has_metrics: bool
    keyword_matches: int


class ContentScorer:
    """Calculates final scores for content items.

    Attributes:
        config: Scoring configuration
        ai_scorer: Optional AI scorer; None disables blending
    """

    def __init__(
        self,
        config: ScoringConfig | None = None,
        ai_scorer: AIScorer | None = None,
    ):
        """Initialize scorer.

        Args:
            config: Scoring configuration (uses defaults if not provided)
            ai_scorer: AI scorer used when ``use_ai`` is requested
        """
        self.config = config or ScoringConfig()
        self.ai_scorer = ai_scorer

    @cached_property
    def _keyword_patterns(self) -> list[re.Pattern[str]]:
        return [re.compile(rf"\b{re.escape(k)}\b") for k in self.config.keywords]

    @cached_property
    def _quality_patterns(self) -> list[re.Pattern[str]]:
        return [re.compile(rf"\b{re.escape(k)}\b") for k in self.config.quality_indicators]

    async def score_content(
        self,
        item: ContentItem,
        use_ai: bool = True,
        now: datetime | None = None,
    ) -> ScoredItem:
        """Score one item.

        Never raises for missing fields or AI failures; the AI part is
        simply dropped when unavailable.

        Args:
            item: Item to score
            use_ai: Blend AI sub-scores when an AI scorer is configured
            now: Reference time for freshness (default: current time)

        Returns:
            ScoredItem with final score, category and confidence
        """
        components, rule_confidence = self.score_rules(item, now=now)
        rule_score = _clamp(components.total)

        assessment: AIAssessment | None = None
        if use_ai and self.ai_scorer is not None:
            try:
                assessment = await self.ai_scorer.assess(item)
            except AIScoringError as e:
                logger.warning(
                    "AI scoring unavailable, using rule-based score",
                    title=item.title[:50],
                    error=e.message,
                )

        score, confidence = self.blend(rule_score, rule_confidence, assessment)
        category = self.config.categories.label(score)

        logger.debug(
            "Content scored",
            title=item.title[:50],
            score=score,
            rule_score=rule_score,
            category=category,
            ai=assessment is not None,
        )

        return ScoredItem(
            **item.model_dump(),
            score=score,
            category=category,
            confidence=confidence,
            rule_score=rule_score,
            components=components,
            ai=assessment,
            ai_summary=(assessment.summary or None) if assessment else None,
            ai_reasoning=(assessment.reasoning or None) if assessment else None,
        )

    def score_rules(
        self, item: ContentItem, now: datetime | None = None
    ) -> tuple[ScoreComponents, float]:
        """Rule-based factors and confidence for an item.

        Returns:
            Tuple of (components, confidence)
        """
        now = now or datetime.now(UTC)
        criteria = self.extract_criteria(item, now)
        components = ScoreComponents(
            quality=self._calc_quality(criteria),
            relevance=self._calc_relevance(criteria),
            freshness=self._calc_freshness(criteria),
            completeness=self._calc_completeness(criteria),
            fit_adjustment=self._calc_fit_adjustment(item, now),
        )
        return components, self._calc_confidence(criteria)

    def blend(
        self,
        rule_score: int,
        rule_confidence: float,
        assessment: AIAssessment | None,
    ) -> tuple[int, float]:
        """Blend rule-based and AI results.

        Returns:
            Tuple of (final score 0-100, confidence 0-1)
        """
        if assessment is None:
            return rule_score, rule_confidence

        weight = self.config.ai_weight
        blended = (1 - weight) * rule_score + weight * assessment.score_100
        confidence = (1 - weight) * rule_confidence + weight * assessment.confidence
        if not math.isfinite(blended) or not math.isfinite(confidence):
            return rule_score, rule_confidence
        return _clamp(round(blended)), round(min(1.0, max(0.0, confidence)), 2)

    def extract_criteria(self, item: ContentItem, now: datetime) -> ScoringCriteria:
        """Extract scoring facts from an item."""
        meta = item.metadata
        text = f"{item.title} {item.description}".lower()
        stars = _as_number(meta.get("stars"))

        event_date = self._event_date(item, now)
        age_days = (now - event_date).total_seconds() / 86400 if event_date else None

        has_metrics = (
            (stars is not None and stars > self.config.high_star_count)
            or any(meta.get(k) for k in METRIC_KEYS)
            or any(p.search(text) for p in self._quality_patterns)
        )
        has_funding = any(_as_number(meta.get(k)) for k in FUNDING_KEYS) or (
            stars is not None
            and stars > self.config.high_star_count * VERY_HIGH_STAR_MULTIPLIER
        )

        return ScoringCriteria(
            has_title=bool(item.title),
            has_description=bool(item.description) and item.description != item.title,
            description_length=len(item.description),
            has_url=bool(item.url),
            has_date=event_date is not None or meta.get("founded_year") is not None,
            age_days=age_days,
            has_team=any(meta.get(k) for k in TEAM_KEYS),
            has_funding=has_funding,
            has_metrics=has_metrics,
            keyword_matches=sum(1 for p in self._keyword_patterns if p.search(text)),
        )

    # ============================================
    # Factor calculations
    # ============================================

    def _calc_quality(self, c: ScoringCriteria) -> int:
        """Quality points: title 2, description 3, >200 chars 5, >500 chars 10, metrics 10."""
        points = 0
        if c.has_title:
            points += 2
        if c.has_description:
            points += 3
        if c.description_length > 200:
            points += 5
        if c.description_length > 500:
            points += 10
        if c.has_metrics:
            points += 10
        return self._scale(points, 30, self.config.weights.quality)

    def _calc_relevance(self, c: ScoringCriteria) -> int:
        """Relevance points per keyword match, zero below the minimum match count."""
        if c.keyword_matches < self.config.min_keyword_matches:
            return 0
        maximum = self.config.weights.relevance
        return min(maximum, c.keyword_matches * self.config.points_per_keyword)

    def _calc_freshness(self, c: ScoringCriteria) -> int:
        """Freshness points by age band; unknown or >90 day old dates earn nothing."""
        if c.age_days is None:
            return 0
        maximum = self.config.weights.freshness
        for max_age, share in FRESHNESS_BANDS:
            if c.age_days <= max_age:
                return round(maximum * share)
        return 0

    def _calc_completeness(self, c: ScoringCriteria) -> int:
        """Completeness points: url 3, date 3, team 7, funding 7."""
        points = 0
        if c.has_url:
            points += 3
        if c.has_date:
            points += 3
        if c.has_team:
            points += 7
        if c.has_funding:
            points += 7
        return self._scale(points, 20, self.config.weights.completeness)

    def _calc_fit_adjustment(self, item: ContentItem, now: datetime) -> int:
        """Type-specific bonus/penalty for the target bands.

        Missing fields contribute nothing.
        """
        bands = self.config.fit_bands
        meta = item.metadata
        adjustment = 0

        def apply(ok: bool) -> None:
            nonlocal adjustment
            adjustment += bands.bonus if ok else -bands.penalty

        if item.type == ContentType.PROJECT:
            team_size = _as_number(meta.get("team_size"))
            if team_size is not None:
                apply(team_size <= bands.max_team_size)
            funding = _as_number(meta.get("funding_raised"))
            if funding is not None:
                apply(funding <= bands.max_funding_raised)
            founded = _as_number(meta.get("founded_year"))
            if founded is not None:
                apply(founded >= bands.min_founded_year)

        elif item.type == ContentType.FUNDING:
            deadline = parse_datetime(meta.get("deadline"))
            if deadline is not None:
                days_left = (deadline - now).total_seconds() / 86400
                if days_left < 0:
                    adjustment -= bands.penalty
                elif days_left <= bands.deadline_window_days:
                    adjustment += bands.bonus

        return adjustment

    def _calc_confidence(self, c: ScoringCriteria) -> float:
        """Share of basic checks passed, rounded to two decimals."""
        checks = [
            c.has_title,
            c.has_description,
            c.description_length > 50,
            c.has_url,
            c.has_date,
        ]
        return round(sum(checks) / len(checks), 2)

    # ============================================
    # Helpers
    # ============================================

    def _event_date(self, item: ContentItem, now: datetime) -> datetime | None:
        """Date freshness is measured from.

        Funding programs with a future deadline are open, so they count as
        fresh regardless of when they were announced.
        """
        if item.type == ContentType.FUNDING:
            deadline = parse_datetime(item.metadata.get("deadline"))
            if deadline is not None and deadline >= now:
                return now
        for key in DATE_KEYS:
            parsed = parse_datetime(item.metadata.get(key))
            if parsed is not None:
                return min(parsed, now)
        return None

    @staticmethod
    def _scale(points: int, native_max: int, configured_max: int) -> int:
        if native_max == configured_max:
            return min(points, configured_max)
        return min(configured_max, round(points * configured_max / native_max))


def _clamp(value: float) -> int:
    if not math.isfinite(value):
        return 0
    return int(min(100, max(0, value)))


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int | float):
        return float(value) if math.isfinite(value) else None
    return None


__all__ = [
    "ContentScorer",
    "ScoringCriteria",
    "FRESHNESS_BANDS",
]
