"""Unit tests for scoring and dedup configuration models."""

import pytest
from pydantic import ValidationError

from curator.config import CategoryThresholds, DedupConfig, ScoringConfig, ScoringWeights
from curator.config.validators import normalize_string_list, validate_weights_sum


class TestScoringWeights:
    """Tests for ScoringWeights."""

    def test_default_weights_sum_to_100(self):
        """Test default factor maxima."""
        weights = ScoringWeights()
        assert weights.quality + weights.relevance + weights.freshness + weights.completeness == 100

    def test_invalid_sum_rejected(self):
        """Test that maxima not summing to 100 fail validation."""
        with pytest.raises(ValidationError, match="sum to 100"):
            ScoringWeights(quality=40, relevance=30, freshness=20, completeness=20)

    def test_custom_weights(self):
        """Test a valid custom split."""
        weights = ScoringWeights(quality=25, relevance=40, freshness=20, completeness=15)
        assert weights.relevance == 40


class TestCategoryThresholds:
    """Tests for category labels."""

    @pytest.mark.parametrize(
        ("score", "label"),
        [(100, "high-fit"), (80, "high-fit"), (79, "medium-fit"), (50, "medium-fit"),
         (49, "low-fit"), (0, "low-fit")],
    )  # fmt: skip
    def test_label_bands(self, score, label):
        """Test default band boundaries."""
        assert CategoryThresholds().label(score) == label

    def test_order_validated(self):
        """Test that high_fit below medium_fit is rejected."""
        with pytest.raises(ValidationError):
            CategoryThresholds(high_fit=40, medium_fit=60)


class TestScoringConfig:
    """Tests for ScoringConfig."""

    def test_keywords_normalized(self):
        """Test that keyword lists are lower-cased and stripped."""
        config = ScoringConfig(keywords=["  Web3 ", "AI", ""], quality_indicators="YC")

        assert config.keywords == ["web3", "ai"]
        assert config.quality_indicators == ["yc"]

    def test_ai_weight_bounds(self):
        """Test that ai_weight must be a share."""
        with pytest.raises(ValidationError):
            ScoringConfig(ai_weight=1.5)


class TestDedupConfig:
    """Tests for DedupConfig."""

    def test_defaults(self):
        """Test default thresholds and tracking parameters."""
        config = DedupConfig()

        assert config.similarity_threshold == 0.85
        assert config.title_weight == 0.7
        assert "fbclid" in config.tracking_params

    def test_tracking_params_lowercased(self):
        """Test that parameter names are normalized."""
        config = DedupConfig(tracking_params=["UTM_Source", "Ref"])
        assert config.tracking_params == ["utm_source", "ref"]


class TestValidators:
    """Tests for shared validators."""

    def test_validate_weights_sum_tolerance(self):
        """Test tolerance handling."""
        validate_weights_sum({"a": 0.5, "b": 0.505}, tolerance=0.01)

        with pytest.raises(ValueError):
            validate_weights_sum({"a": 0.5, "b": 0.6})

    def test_normalize_string_list(self):
        """Test None, string and list inputs."""
        assert normalize_string_list(None) == []
        assert normalize_string_list(" Rust ") == ["rust"]
        assert normalize_string_list(["A", 3, " "]) == ["a"]
        assert normalize_string_list(42) == []
