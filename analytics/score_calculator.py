#!/usr/bin/env python3
"""
ESG Score Calculator
Turns raw category metrics into a 0-100 ESG score and letter grade.

Each category score is the mean of its metrics after min/max normalization
(inverted where lower raw values are better). Missing or malformed metrics
count as the neutral value 50.

Author: ESG Analytics Team
Version: 1.0.0
"""

import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

from analytics.esg_types import CATEGORIES, CompanyESGInput, ESGScore
from config.config import ReferenceData, get_reference_data
from utils.stats_utils import NEUTRAL_SCORE, clamp, normalize_metric, round_half_up
from utils.validation import to_number


CATEGORY_WEIGHTS: Dict[str, float] = {
    'environmental': 0.40,
    'social': 0.35,
    'governance': 0.25
}

GRADE_THRESHOLDS = (
    (90, 'A+'),
    (80, 'A'),
    (70, 'B'),
    (60, 'C'),
)
LOWEST_GRADE = 'D'


class ScoreCalculator:
    """Real-time ESG score calculator."""

    def __init__(self, reference_data: Optional[ReferenceData] = None):
        """Initialize the calculator.

        Args:
            reference_data: Reference tables; the configured tables are used when omitted
        """
        self.reference_data = reference_data or get_reference_data()
        self.weights = dict(CATEGORY_WEIGHTS)
        self.logger = logging.getLogger(__name__)

    def calculate(self, company_data: Any) -> ESGScore:
        """Calculate the overall ESG score.

        Args:
            company_data: CompanyESGInput or a mapping with environmental/social/governance maps

        Returns:
            Freshly created ESGScore

        Raises:
            InvalidInputError: If ``company_data`` is not a mapping
        """
        company = CompanyESGInput.from_dict(company_data)

        scores = {}
        for category in CATEGORIES:
            score = self.category_score(company, category)
            if math.isnan(score) or score < 0 or score > 100:
                self.logger.warning(f"Discarding out-of-range {category} score {score}")
                score = 0.0
            scores[category] = score

        weighted_score = sum(scores[category] * self.weights[category] for category in CATEGORIES)
        final_score = int(round_half_up(clamp(weighted_score, 0, 100)))

        return ESGScore(
            overall_score=final_score,
            category_scores=scores,
            grade=self.get_grade(final_score)
        )

    def category_score(self, company: CompanyESGInput, category: str) -> float:
        """Unweighted 0-100 score for one category.

        Args:
            company: Company input
            category: environmental, social or governance

        Returns:
            Mean of the normalized metrics; 50 when the category defines no metrics
        """
        ranges = self.reference_data.metric_ranges.get(category, {})
        if not ranges:
            return NEUTRAL_SCORE

        values = company.category(category)
        normalized = [
            normalize_metric(
                values.get(metric),
                float(metric_range.get('min', 0)),
                float(metric_range.get('max', 100)),
                bool(metric_range.get('inverse', False))
            )
            for metric, metric_range in ranges.items()
        ]

        return sum(normalized) / len(normalized)

    def category_scores(self, company_data: Any) -> Dict[str, float]:
        """Unweighted scores for every category."""
        company = CompanyESGInput.from_dict(company_data)
        return {category: self.category_score(company, category) for category in CATEGORIES}

    @staticmethod
    def get_grade(score: float) -> str:
        """Letter grade for an overall score."""
        for threshold, grade in GRADE_THRESHOLDS:
            if score >= threshold:
                return grade
        return LOWEST_GRADE

    @staticmethod
    def calculate_trend_score(historical_scores: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
        """Short-term trend across the last three recorded overall scores.

        Args:
            historical_scores: Ordered records carrying a ``score`` field

        Returns:
            Dictionary with ``trend`` (points per period) and ``momentum``
        """
        scores: List[float] = []
        for record in historical_scores or []:
            value = to_number(record.get('score')) if isinstance(record, Mapping) else None
            if value is not None:
                scores.append(value)

        if len(scores) < 2:
            return {'trend': 0, 'momentum': 'stable'}

        recent = scores[-3:]
        trend = (recent[-1] - recent[0]) / len(recent)

        if trend > 2:
            momentum = 'improving'
        elif trend < -2:
            momentum = 'declining'
        else:
            momentum = 'stable'

        return {'trend': round_half_up(trend, 2), 'momentum': momentum}
