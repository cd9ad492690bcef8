#!/usr/bin/env python3
"""
Peer Benchmarking Engine
Compares an ESG score against industry reference values.

Percentile standing is a normal-distribution estimate around the industry
benchmark (fixed dispersion of 15 points), not an empirical rank among real
peers. ``calculate_market_position`` covers the empirical case when peer
scores are available.

Author: ESG Analytics Team
Version: 1.0.0
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from analytics.esg_types import (
    CATEGORIES, BenchmarkComparison, CategoryBenchmark, ESGScore
)
from config.config import ReferenceData, get_reference_data
from utils.stats_utils import normal_cdf, round_half_up
from utils.validation import InvalidInputError, normalize_region, require_industry, to_number


BENCHMARK_STD_DEV = 15.0
STATUS_BAND = 5.0


class BenchmarkingEngine:
    """Industry benchmarking and percentile estimation."""

    def __init__(self, reference_data: Optional[ReferenceData] = None):
        """Initialize the engine.

        Args:
            reference_data: Reference tables; the configured tables are used when omitted
        """
        self.reference_data = reference_data or get_reference_data()
        self.logger = logging.getLogger(__name__)

    def compare(self, score: Any, industry: str, region: str = 'global') -> BenchmarkComparison:
        """Compare a computed score with the industry reference.

        Args:
            score: ESGScore (or its JSON mapping)
            industry: Industry identifier; unknown industries use the default table entry
            region: Region identifier, echoed in the result

        Returns:
            BenchmarkComparison for every category and overall

        Raises:
            InvalidInputError: If the score is not a score record or industry is empty
        """
        if isinstance(score, Mapping):
            score = ESGScore.from_dict(score)
        if not isinstance(score, ESGScore):
            raise InvalidInputError(f"Invalid company data for benchmarking: {type(score).__name__}")

        industry_key = require_industry(industry)
        benchmark = self.get_industry_benchmark(industry_key)

        comparisons = {
            category: self.calculate_performance_gap(score.category_scores.get(category, 0.0), benchmark[category])
            for category in CATEGORIES
        }

        return BenchmarkComparison(
            environmental=comparisons['environmental'],
            social=comparisons['social'],
            governance=comparisons['governance'],
            overall=self.calculate_overall_ranking(score.overall_score, benchmark),
            industry=industry_key,
            region=normalize_region(region)
        )

    def get_industry_benchmark(self, industry: str) -> Dict[str, float]:
        """Reference triple for an industry.

        Unknown industries fall back to the default industry; a missing axis
        falls back to the configured flat score (70).
        """
        tables = self.reference_data.industry_benchmarks
        entry = tables.get(industry)

        if entry is None:
            self.logger.info(
                f"No benchmark for industry {industry}, using {self.reference_data.default_benchmark_industry}"
            )
            entry = tables.get(self.reference_data.default_benchmark_industry, {})

        fallback = float(self.reference_data.fallback_benchmark_score)
        benchmark = {}
        for category in CATEGORIES:
            value = to_number(entry.get(category))
            benchmark[category] = value if value is not None else fallback

        return benchmark

    def calculate_performance_gap(self, company_score: Any, benchmark_score: Any) -> CategoryBenchmark:
        """Gap, percentile and status of one score against its benchmark."""
        score = to_number(company_score)
        score = score if score is not None else 0.0

        benchmark = to_number(benchmark_score)
        benchmark = benchmark if benchmark is not None else float(self.reference_data.fallback_benchmark_score)

        gap = round_half_up(score - benchmark, 2)

        return CategoryBenchmark(
            score=score,
            benchmark=benchmark,
            gap=gap,
            percentile=self.calculate_percentile(score, benchmark),
            status=self.get_status(gap)
        )

    def calculate_overall_ranking(self, overall_score: Any, benchmark: Mapping[str, float]) -> CategoryBenchmark:
        """Overall comparison against the mean of the three category benchmarks."""
        average_benchmark = sum(benchmark[category] for category in CATEGORIES) / len(CATEGORIES)
        return self.calculate_performance_gap(overall_score, average_benchmark)

    @staticmethod
    def calculate_percentile(score: float, benchmark: float) -> int:
        """Normal-approximation percentile of ``score`` around ``benchmark``."""
        z_score = (score - benchmark) / BENCHMARK_STD_DEV
        return int(round_half_up(normal_cdf(z_score) * 100))

    @staticmethod
    def get_status(gap: float) -> str:
        """Leader above +5 points, laggard below -5, otherwise average."""
        if gap > STATUS_BAND:
            return 'leader'
        if gap < -STATUS_BAND:
            return 'laggard'
        return 'average'

    @staticmethod
    def generate_competitive_insights(comparison: BenchmarkComparison) -> List[str]:
        """Sentences describing leader and laggard positions."""
        insights = []

        for category, data in comparison.items():
            if data.status == 'leader':
                insights.append(f"Strong performance in {category} - {data.gap:.1f} points above industry average")
            elif data.status == 'laggard':
                insights.append(f"Improvement needed in {category} - {abs(data.gap):.1f} points below industry average")

        return insights

    def identify_best_practices(self, top_performers: Sequence[Any], category: str) -> Dict[str, Any]:
        """Best-practice playbook for a category, citing up to three leaders."""
        return {
            'category': category,
            'practices': list(self.reference_data.best_practices),
            'leaders': list(top_performers or [])[:3],
            'implementationPriority': 'high'
        }

    @staticmethod
    def calculate_market_position(company_score: float, market_data: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
        """Empirical rank of a company among peer scores.

        Args:
            company_score: The company's overall score
            market_data: Peer records carrying a ``score`` field

        Returns:
            Dictionary with rank, totalCompanies, percentileRank and quartile
        """
        peer_scores = []
        for company in market_data or []:
            value = to_number(company.get('score')) if isinstance(company, Mapping) else None
            if value is not None:
                peer_scores.append(value)

        total = len(peer_scores)
        if total == 0:
            return {'rank': 1, 'totalCompanies': 0, 'percentileRank': 0, 'quartile': 'N/A'}

        ordered = sorted(peer_scores, reverse=True)
        rank = next((index + 1 for index, peer in enumerate(ordered) if peer <= company_score), total + 1)
        rank = min(rank, total)

        if rank <= total * 0.25:
            quartile = 'Q1'
        elif rank <= total * 0.5:
            quartile = 'Q2'
        elif rank <= total * 0.75:
            quartile = 'Q3'
        else:
            quartile = 'Q4'

        return {
            'rank': rank,
            'totalCompanies': total,
            'percentileRank': int(round_half_up((1 - rank / total) * 100)),
            'quartile': quartile
        }
