#!/usr/bin/env python3
"""
Trend Analysis
Fits trend lines over historical ESG series and projects near-term change.

Features:
- Least-squares slope over the most recent window of observations
- Population volatility and three-point momentum
- Confidence weighting by sample size and volatility
- Horizon predictions with 95% bands
- Narrative insights and trend risk factors

Author: ESG Analytics Team
Version: 1.0.0
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from analytics.esg_types import (
    CATEGORIES, CategoryForecast, TrendAnalysisResult, TrendPrediction, TrendResult
)
from utils.stats_utils import ols_slope, population_std, relative_change, round_half_up
from utils.validation import InvalidInputError, to_number


DEFAULT_WINDOW_MONTHS = 12
DEFAULT_HORIZONS = {'nextQuarter': 3, 'nextYear': 12}

DIRECTION_THRESHOLD = 0.1
MOMENTUM_THRESHOLD = 0.05
MOMENTUM_WINDOW = 3
MIN_CONFIDENCE = 0.3
Z_95 = 1.96


class TrendAnalysis:
    """Trend fitting and projection for ESG category series."""

    def __init__(self, horizons: Optional[Mapping[str, int]] = None):
        """Initialize the analyzer.

        Args:
            horizons: Prediction horizons in months, keyed by output name
        """
        self.horizons = dict(horizons or DEFAULT_HORIZONS)
        self.logger = logging.getLogger(__name__)

    def analyze(self, series: Any, window_months: int = DEFAULT_WINDOW_MONTHS) -> Dict[str, TrendResult]:
        """Fit a trend for every ESG category.

        Args:
            series: Sequence of ``{category, value, date}`` records
            window_months: Number of most recent observations to keep per category

        Returns:
            TrendResult per category; the default trend where fewer than two points exist

        Raises:
            InvalidInputError: If ``window_months`` is not a positive integer
        """
        if isinstance(window_months, bool) or not isinstance(window_months, int) or window_months < 1:
            raise InvalidInputError(f"Trend window must be a positive integer, got {window_months!r}")

        frame = self._prepare_frame(series)

        return {
            category: self.calculate_category_trend(frame, category, window_months)
            for category in CATEGORIES
        }

    def analyze_trends(self, series: Any, window_months: int = DEFAULT_WINDOW_MONTHS) -> TrendAnalysisResult:
        """Trends plus predictions, insights and risk factors."""
        trends = self.analyze(series, window_months)

        return TrendAnalysisResult(
            trends=trends,
            predictions=self.generate_predictions(trends),
            insights=self.generate_insights(trends),
            risk_factors=self.identify_risk_factors(trends)
        )

    def _prepare_frame(self, series: Any) -> pd.DataFrame:
        """Turn raw records into a clean frame of category/value/date rows."""
        if not isinstance(series, (list, tuple)):
            if series is not None:
                self.logger.warning(f"Invalid historical data for trend analysis: {type(series).__name__}")
            series = []

        rows = []
        for record in series:
            if not isinstance(record, Mapping):
                continue

            raw_date = record.get('date')
            if not pd.api.types.is_scalar(raw_date):
                continue

            value = to_number(record.get('value'))
            date = pd.to_datetime(raw_date, errors='coerce', utc=True)
            category = record.get('category')

            if value is None or pd.isna(date) or not isinstance(category, str):
                continue

            rows.append({'category': category.strip().lower(), 'value': value, 'date': date})

        skipped = len(series) - len(rows)
        if skipped:
            self.logger.debug(f"Skipped {skipped} unusable historical records")

        return pd.DataFrame(rows, columns=['category', 'value', 'date'])

    def calculate_category_trend(self, frame: pd.DataFrame, category: str, months: int) -> TrendResult:
        """Trend for a single category over its last ``months`` observations."""
        category_data = (
            frame[frame['category'] == category]
            .sort_values('date', kind='mergesort')
            .tail(months)
        )

        if len(category_data) < 2:
            return TrendResult.default()

        values = category_data['value'].tolist()
        slope = ols_slope(values)
        volatility = population_std(values)

        if slope > DIRECTION_THRESHOLD:
            direction = 'improving'
        elif slope < -DIRECTION_THRESHOLD:
            direction = 'declining'
        else:
            direction = 'stable'

        return TrendResult(
            direction=direction,
            slope=round_half_up(slope, 3),
            volatility=round_half_up(volatility, 2),
            momentum=self.calculate_momentum(values),
            confidence=self.calculate_confidence(len(values), volatility),
            data_points=len(values)
        )

    @staticmethod
    def calculate_momentum(values: Sequence[float]) -> str:
        """Compare the last three observations with the three before them."""
        if len(values) < 2 * MOMENTUM_WINDOW:
            return 'neutral'

        recent = values[-MOMENTUM_WINDOW:]
        earlier = values[-2 * MOMENTUM_WINDOW:-MOMENTUM_WINDOW]

        change = relative_change(recent, earlier)
        if change is None:
            return 'neutral'

        if change > MOMENTUM_THRESHOLD:
            return 'accelerating'
        if change < -MOMENTUM_THRESHOLD:
            return 'decelerating'
        return 'steady'

    @staticmethod
    def calculate_confidence(data_points: int, volatility: float) -> float:
        """Confidence from sample size, penalized by volatility (floor 0.3)."""
        base_confidence = min(data_points / 12, 1) * 0.7
        volatility_penalty = min(volatility / 10, 0.3)
        return max(MIN_CONFIDENCE, base_confidence - volatility_penalty)

    def generate_predictions(self, trends: Mapping[str, TrendResult]) -> Dict[str, CategoryForecast]:
        """Forecasts for every configured horizon."""
        return {
            category: CategoryForecast(
                horizons={name: self.predict_next_period(trend, months) for name, months in self.horizons.items()},
                target_achievability=self.assess_target_achievability(trend)
            )
            for category, trend in trends.items()
        }

    @staticmethod
    def predict_next_period(trend: TrendResult, months: int) -> TrendPrediction:
        """Expected change over ``months`` with a +/-1.96 sigma band."""
        base_change = trend.slope * months
        interval = trend.volatility * Z_95

        return TrendPrediction(
            expected_change=round_half_up(base_change, 2),
            low=round_half_up(base_change - interval, 2),
            high=round_half_up(base_change + interval, 2),
            confidence=trend.confidence
        )

    @staticmethod
    def assess_target_achievability(trend: TrendResult) -> Dict[str, str]:
        if trend.direction == 'improving' and trend.momentum == 'accelerating':
            return {'likelihood': 'high', 'recommendation': 'Consider more ambitious targets'}
        if trend.direction == 'declining':
            return {'likelihood': 'low', 'recommendation': 'Implement corrective measures immediately'}
        return {'likelihood': 'moderate', 'recommendation': 'Monitor closely and adjust strategy'}

    @staticmethod
    def generate_insights(trends: Mapping[str, TrendResult]) -> List[str]:
        insights = []

        for category, trend in trends.items():
            if trend.direction == 'improving' and trend.confidence > 0.7:
                insights.append(
                    f"{category} performance shows strong positive trend with {trend.confidence * 100:.0f}% confidence"
                )
            elif trend.direction == 'declining' and trend.confidence > 0.6:
                insights.append(f"{category} performance declining - immediate attention required")
            elif trend.volatility > 5:
                insights.append(f"{category} shows high volatility - consider stabilization measures")

        return insights

    @staticmethod
    def identify_risk_factors(trends: Mapping[str, TrendResult]) -> List[Dict[str, str]]:
        risks = []

        for category, trend in trends.items():
            if trend.direction == 'declining' and trend.momentum == 'accelerating':
                risks.append({
                    'category': category,
                    'risk': 'Accelerating decline',
                    'severity': 'high',
                    'impact': 'Performance deterioration may affect overall ESG rating'
                })
            elif trend.volatility > 8:
                risks.append({
                    'category': category,
                    'risk': 'High volatility',
                    'severity': 'medium',
                    'impact': 'Unpredictable performance may indicate systemic issues'
                })

        return risks
