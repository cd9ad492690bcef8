#!/usr/bin/env python3
"""
ESG Analytics Dashboard
Composes the scoring, benchmarking, trend and risk engines into one report.

Features:
- Per-engine fault isolation with documented default results
- Executive summary and prioritized recommendations
- Per-engine performance tracking
- Concurrent report generation over worker threads

Author: ESG Analytics Team
Version: 1.0.0
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from analytics.benchmarking_engine import BenchmarkingEngine
from analytics.esg_types import (
    CATEGORIES, AnalyticsReport, BenchmarkComparison, CompanyESGInput, ESGScore,
    ExecutiveSummary, Recommendation, RiskAssessmentResult, TrendAnalysisResult
)
from analytics.risk_assessment import RiskAssessment
from analytics.score_calculator import ScoreCalculator
from analytics.trend_analysis import TrendAnalysis
from config.config import ReferenceData, get_config, get_reference_data
from utils.logging_utils import AnalyticsLogger, get_analytics_logger, performance_context
from utils.validation import normalize_region


PRIORITY_ORDER = {'high': 3, 'medium': 2, 'low': 1}

LOW_SCORE_THRESHOLD = 60
URGENT_TREND_CONFIDENCE = 0.6
HIGH_TREND_CONFIDENCE = 0.7
MAX_URGENT_ACTIONS = 5
TOP_RISK_COUNT = 3

SCORE_ENGINE = 'scoreCalculator'
BENCHMARK_ENGINE = 'benchmarking'
TREND_ENGINE = 'trendAnalysis'
RISK_ENGINE = 'riskAssessment'


@dataclass
class EngineResult:
    """Outcome of a single engine call: a value or the error it raised."""
    name: str
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, default_factory: Callable[[], Any]) -> Any:
        return self.value if self.ok else default_factory()


class AnalyticsOrchestrator:
    """Builds complete analytics reports from raw company metrics."""

    def __init__(self, reference_data: Optional[ReferenceData] = None,
                 analytics_logger: Optional[AnalyticsLogger] = None,
                 horizons: Optional[Dict[str, int]] = None):
        """Initialize the orchestrator and its engines.

        Args:
            reference_data: Reference tables shared by every engine
            analytics_logger: Logger for engine failures and report events;
                the global AnalyticsLogger is used when omitted
            horizons: Trend prediction horizons in months
        """
        self.config = get_config().analytics
        self.reference_data = reference_data or get_reference_data()
        self.analytics_logger = analytics_logger
        self.logger = logging.getLogger(__name__)

        self.score_calculator = ScoreCalculator(self.reference_data)
        self.benchmarking_engine = BenchmarkingEngine(self.reference_data)
        self.trend_analysis = TrendAnalysis(horizons or self.config.prediction_horizons)
        self.risk_assessment = RiskAssessment(self.reference_data, self.score_calculator)

    @property
    def _analytics_logger(self) -> Optional[AnalyticsLogger]:
        return self.analytics_logger or get_analytics_logger()

    def _run_engine(self, name: str, func: Callable[..., Any], *args) -> EngineResult:
        """Call one engine, capturing any exception in the result."""
        analytics_logger = self._analytics_logger

        try:
            if analytics_logger is not None:
                with analytics_logger.performance_context(name, log_errors=False):
                    value = func(*args)
            else:
                with performance_context(name, log_errors=False):
                    value = func(*args)
        except Exception as e:
            self._log_engine_failure(name, e)
            return EngineResult(name=name, error=e)

        return EngineResult(name=name, value=value)

    def _log_engine_failure(self, name: str, exception: BaseException):
        analytics_logger = self._analytics_logger
        if analytics_logger is not None:
            analytics_logger.log_engine_failure(name, exception)
        else:
            logging.getLogger('esg_analytics.engines').warning(f"{name} failed: {exception}")

    def _resolve_history(self, company_data: Any, history: Any) -> Any:
        if history is not None:
            return history
        try:
            return list(CompanyESGInput.from_dict(company_data).historical_data)
        except ValueError:
            return []

    def _window(self, window_months: Optional[int]) -> int:
        return self.config.trend_window_months if window_months is None else window_months

    def _score_then_benchmark(self, company_data: Any, industry: str, region: str):
        score = self._run_engine(SCORE_ENGINE, self.score_calculator.calculate, company_data)
        benchmark = self._run_engine(
            BENCHMARK_ENGINE, self.benchmarking_engine.compare,
            score.value_or(ESGScore.default), industry, region
        )
        return score, benchmark

    def generate_report(self, company_data: Any, industry: str, region: str = 'global',
                        history: Any = None, window_months: Optional[int] = None) -> AnalyticsReport:
        """Generate a complete analytics report.

        Never raises: an engine that fails is logged and replaced by its
        default result, and its name is listed in ``degraded_sections``.

        Args:
            company_data: Mapping with environmental/social/governance metric maps
            industry: Industry identifier
            region: Region identifier
            history: Historical ``{category, value, date}`` records; taken from
                the input's ``historicalData`` when omitted
            window_months: Trend window; the configured window when omitted

        Returns:
            AnalyticsReport
        """
        score, benchmark = self._score_then_benchmark(company_data, industry, region)
        trends = self._run_engine(
            TREND_ENGINE, self.trend_analysis.analyze_trends,
            self._resolve_history(company_data, history), self._window(window_months)
        )
        risks = self._run_engine(RISK_ENGINE, self.risk_assessment.assess, company_data, industry, region)

        return self._build_report([score, benchmark, trends, risks], industry, region)

    async def generate_report_async(self, company_data: Any, industry: str, region: str = 'global',
                                    history: Any = None, window_months: Optional[int] = None) -> AnalyticsReport:
        """Generate a report with the engine branches running in worker threads.

        Scoring and benchmarking form one branch, since benchmarking consumes
        the score; trend analysis and risk assessment run alongside it.
        """
        branches = await asyncio.gather(
            asyncio.to_thread(self._score_then_benchmark, company_data, industry, region),
            asyncio.to_thread(
                self._run_engine, TREND_ENGINE, self.trend_analysis.analyze_trends,
                self._resolve_history(company_data, history), self._window(window_months)
            ),
            asyncio.to_thread(self._run_engine, RISK_ENGINE, self.risk_assessment.assess,
                              company_data, industry, region),
            return_exceptions=True
        )

        score_branch, trends, risks = branches

        if isinstance(score_branch, BaseException):
            self._log_engine_failure(SCORE_ENGINE, score_branch)
            score_branch = (EngineResult(SCORE_ENGINE, error=score_branch),
                            EngineResult(BENCHMARK_ENGINE, error=score_branch))
        if isinstance(trends, BaseException):
            self._log_engine_failure(TREND_ENGINE, trends)
            trends = EngineResult(TREND_ENGINE, error=trends)
        if isinstance(risks, BaseException):
            self._log_engine_failure(RISK_ENGINE, risks)
            risks = EngineResult(RISK_ENGINE, error=risks)

        score, benchmark = score_branch
        return self._build_report([score, benchmark, trends, risks], industry, region)

    def _build_report(self, results: List[EngineResult], industry: Any, region: Any) -> AnalyticsReport:
        score, benchmark, trends, risks = results

        industry_label = industry.strip().lower() if isinstance(industry, str) else ''
        region_label = normalize_region(region)

        esg_score = score.value_or(ESGScore.default)
        benchmarking = benchmark.value_or(lambda: BenchmarkComparison.default(industry_label, region_label))
        trend_analysis = trends.value_or(TrendAnalysisResult.default)
        risk_assessment = risks.value_or(RiskAssessmentResult.default)

        degraded_sections = [result.name for result in results if not result.ok]

        report = AnalyticsReport(
            esg_score=esg_score,
            benchmarking=benchmarking,
            trend_analysis=trend_analysis,
            risk_assessment=risk_assessment,
            summary=self.generate_executive_summary(esg_score, benchmarking, trend_analysis, risk_assessment),
            recommendations=self.generate_recommendations(esg_score, benchmarking, risk_assessment),
            industry=industry_label,
            region=region_label,
            degraded_sections=degraded_sections
        )

        analytics_logger = self._analytics_logger
        if analytics_logger is not None:
            analytics_logger.log_report_event(industry_label, region_label, degraded_sections)
        else:
            self.logger.info(f"Report generated for {industry_label}/{region_label}")

        return report

    @staticmethod
    def generate_executive_summary(esg_score: ESGScore, benchmarking: BenchmarkComparison,
                                   trend_analysis: TrendAnalysisResult,
                                   risk_assessment: RiskAssessmentResult) -> ExecutiveSummary:
        """Headline figures, trends, risks and urgent actions."""
        key_trends = []
        for category, trend in trend_analysis.trends.items():
            if trend.direction == 'stable':
                continue
            level = 'high' if trend.confidence > HIGH_TREND_CONFIDENCE else 'moderate'
            key_trends.append(f"{category}: {trend.direction} ({level} confidence)")

        urgent_actions = [
            f"Address {risk.replace('_', ' ')} immediately"
            for _, risk, entry in risk_assessment.entries()
            if entry.risk_level == 'critical'
        ]
        for category, trend in trend_analysis.trends.items():
            if trend.direction == 'declining' and trend.confidence > URGENT_TREND_CONFIDENCE:
                urgent_actions.append(f"Reverse declining {category} performance")

        return ExecutiveSummary(
            overall_performance=f"ESG Score: {esg_score.overall_score}/100 ({esg_score.grade})",
            market_position=f"{benchmarking.overall.percentile}th percentile in industry",
            key_trends=key_trends,
            top_risks=[risk.risk for risk in risk_assessment.material_risks[:TOP_RISK_COUNT]],
            urgent_actions=urgent_actions[:MAX_URGENT_ACTIONS]
        )

    @staticmethod
    def generate_recommendations(esg_score: ESGScore, benchmarking: BenchmarkComparison,
                                 risk_assessment: RiskAssessmentResult) -> List[Recommendation]:
        """Improvement actions ordered by priority; equal priorities keep discovery order."""
        recommendations = []

        for category in CATEGORIES:
            score = esg_score.category_scores.get(category)
            if score is not None and score < LOW_SCORE_THRESHOLD:
                recommendations.append(Recommendation(
                    category=category,
                    priority='high',
                    action=f"Implement comprehensive {category} improvement program",
                    expected_impact='Significant score improvement'
                ))

        for category, comparison in benchmarking.items():
            if comparison.status == 'laggard':
                recommendations.append(Recommendation(
                    category=category,
                    priority='medium',
                    action=f"Close {abs(comparison.gap):.1f} point gap in {category}",
                    expected_impact='Improved industry positioning'
                ))

        for risk in risk_assessment.material_risks[:TOP_RISK_COUNT]:
            recommendations.append(Recommendation(
                category=risk.category,
                priority='high',
                action=f"Mitigate {risk.risk.replace('_', ' ')} exposure",
                expected_impact='Reduced ESG risk profile'
            ))

        return sorted(recommendations, key=lambda item: PRIORITY_ORDER.get(item.priority, 0), reverse=True)
