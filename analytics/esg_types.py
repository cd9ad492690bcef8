#!/usr/bin/env python3
"""
ESG Analytics Data Structures
Typed records exchanged between the analytics engines.

Every record knows how to render itself with the camelCase field names the
dashboard consumes (``to_dict``), and the records that have a degraded form
expose it as ``default()``.

Author: ESG Analytics Team
Version: 1.0.0
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from utils.validation import require_mapping, to_number


CATEGORIES: Tuple[str, ...] = ('environmental', 'social', 'governance')


def utc_timestamp() -> str:
    """Current UTC time in ISO-8601 form."""
    return datetime.now(timezone.utc).isoformat()


def _frozen_metrics(value: Any) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        return MappingProxyType({})
    return MappingProxyType(dict(value))


@dataclass(frozen=True)
class CompanyESGInput:
    """Raw company metrics, one metric map per ESG category."""
    environmental: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    social: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    governance: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    controls: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    historical_data: Tuple[Mapping[str, Any], ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> 'CompanyESGInput':
        """Build an input record from a loosely typed mapping.

        A category that is missing or not a mapping becomes an empty map.

        Raises:
            InvalidInputError: If ``data`` itself is not a mapping
        """
        if isinstance(data, CompanyESGInput):
            return data
        require_mapping(data, 'company data')

        history = data.get('historicalData', data.get('historical_data')) or ()
        if not isinstance(history, (list, tuple)):
            history = ()

        return cls(
            environmental=_frozen_metrics(data.get('environmental')),
            social=_frozen_metrics(data.get('social')),
            governance=_frozen_metrics(data.get('governance')),
            controls=_frozen_metrics(data.get('controls')),
            historical_data=tuple(item for item in history if isinstance(item, Mapping))
        )

    def category(self, name: str) -> Mapping[str, Any]:
        """Metric map for one category."""
        return getattr(self, name, MappingProxyType({}))


@dataclass
class ESGScore:
    """Overall ESG score with per-category breakdown."""
    overall_score: int
    category_scores: Dict[str, float]
    grade: str
    last_updated: str = field(default_factory=utc_timestamp)

    @classmethod
    def default(cls) -> 'ESGScore':
        return cls(
            overall_score=0,
            category_scores={category: 0.0 for category in CATEGORIES},
            grade='N/A'
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ESGScore':
        """Rebuild a score from its JSON form; unusable values become 0."""
        raw_categories = data.get('categoryScores')
        if not isinstance(raw_categories, Mapping):
            raw_categories = {}

        return cls(
            overall_score=int(round(to_number(data.get('overallScore')) or 0)),
            category_scores={
                category: to_number(raw_categories.get(category)) or 0.0 for category in CATEGORIES
            },
            grade=str(data.get('grade', 'N/A')),
            last_updated=str(data.get('lastUpdated') or utc_timestamp())
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'overallScore': self.overall_score,
            'categoryScores': dict(self.category_scores),
            'grade': self.grade,
            'lastUpdated': self.last_updated
        }


@dataclass
class CategoryBenchmark:
    """Comparison of one score against its industry reference."""
    score: float = 0.0
    benchmark: float = 0.0
    gap: float = 0.0
    percentile: int = 0
    status: str = 'unknown'  # leader, average, laggard

    def to_dict(self) -> Dict[str, Any]:
        return {
            'score': self.score,
            'benchmark': self.benchmark,
            'gap': self.gap,
            'percentile': self.percentile,
            'status': self.status
        }


@dataclass
class BenchmarkComparison:
    """Per-category and overall benchmark comparison."""
    environmental: CategoryBenchmark
    social: CategoryBenchmark
    governance: CategoryBenchmark
    overall: CategoryBenchmark
    industry: str = ''
    region: str = 'global'

    @classmethod
    def default(cls, industry: str = '', region: str = 'global') -> 'BenchmarkComparison':
        return cls(
            environmental=CategoryBenchmark(),
            social=CategoryBenchmark(),
            governance=CategoryBenchmark(),
            overall=CategoryBenchmark(),
            industry=industry,
            region=region
        )

    def items(self) -> List[Tuple[str, CategoryBenchmark]]:
        """Category comparisons followed by the overall comparison."""
        return [(name, getattr(self, name)) for name in CATEGORIES + ('overall',)]

    def to_dict(self) -> Dict[str, Any]:
        result = {name: comparison.to_dict() for name, comparison in self.items()}
        result['industry'] = self.industry
        result['region'] = self.region
        return result


@dataclass
class TrendResult:
    """Fitted trend for one category."""
    direction: str = 'stable'  # improving, declining, stable
    slope: float = 0.0
    volatility: float = 0.0
    momentum: str = 'neutral'  # accelerating, decelerating, steady, neutral
    confidence: float = 0.3
    data_points: int = 0

    @classmethod
    def default(cls) -> 'TrendResult':
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'direction': self.direction,
            'slope': self.slope,
            'volatility': self.volatility,
            'momentum': self.momentum,
            'confidence': self.confidence,
            'dataPoints': self.data_points
        }


@dataclass
class TrendPrediction:
    """Projected change over a horizon with a 95% band."""
    expected_change: float
    low: float
    high: float
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'expectedChange': self.expected_change,
            'range': {'low': self.low, 'high': self.high},
            'confidence': self.confidence
        }


@dataclass
class CategoryForecast:
    """Predictions for every configured horizon plus target achievability."""
    horizons: Dict[str, TrendPrediction]
    target_achievability: Dict[str, str]

    def to_dict(self) -> Dict[str, Any]:
        result = {name: prediction.to_dict() for name, prediction in self.horizons.items()}
        result['targetAchievability'] = dict(self.target_achievability)
        return result


@dataclass
class TrendAnalysisResult:
    """Trends, forecasts and narrative output of the trend engine."""
    trends: Dict[str, TrendResult] = field(default_factory=dict)
    predictions: Dict[str, CategoryForecast] = field(default_factory=dict)
    insights: List[str] = field(default_factory=list)
    risk_factors: List[Dict[str, str]] = field(default_factory=list)

    @classmethod
    def default(cls) -> 'TrendAnalysisResult':
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'trends': {category: trend.to_dict() for category, trend in self.trends.items()},
            'predictions': {category: forecast.to_dict() for category, forecast in self.predictions.items()},
            'insights': list(self.insights),
            'riskFactors': [dict(factor) for factor in self.risk_factors]
        }


@dataclass
class RiskMatrixEntry:
    """Probability x impact assessment of one risk type."""
    probability: float
    impact: float
    risk_score: float
    risk_level: str  # low, medium, high, critical
    mitigation_status: str  # active, planned

    def to_dict(self) -> Dict[str, Any]:
        return {
            'probability': self.probability,
            'impact': self.impact,
            'riskScore': self.risk_score,
            'riskLevel': self.risk_level,
            'mitigationStatus': self.mitigation_status
        }


@dataclass
class MaterialRisk:
    """A risk significant enough to warrant disclosure."""
    category: str
    risk: str
    score: float
    stakeholder_impact: List[str]
    business_impact: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'category': self.category,
            'risk': self.risk,
            'score': self.score,
            'stakeholderImpact': list(self.stakeholder_impact),
            'businessImpact': list(self.business_impact)
        }


@dataclass
class MitigationStrategy:
    """Mitigation plan for a high or critical risk."""
    risk: str
    priority: str  # immediate, high
    actions: List[str]
    timeline: str
    resources: Dict[str, str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'risk': self.risk,
            'priority': self.priority,
            'actions': list(self.actions),
            'timeline': self.timeline,
            'resources': dict(self.resources)
        }


@dataclass
class OverallRisk:
    """Aggregate risk across the whole matrix."""
    score: int = 0
    level: str = 'unknown'
    distribution: Dict[str, int] = field(
        default_factory=lambda: {'critical': 0, 'high': 0, 'medium': 0, 'low': 0}
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'score': self.score,
            'level': self.level,
            'distribution': dict(self.distribution)
        }


@dataclass
class RiskAssessmentResult:
    """Risk matrix with materiality, mitigations and regulatory context."""
    matrix: Dict[str, Dict[str, RiskMatrixEntry]] = field(default_factory=dict)
    overall_risk: OverallRisk = field(default_factory=OverallRisk)
    material_risks: List[MaterialRisk] = field(default_factory=list)
    mitigations: Dict[str, List[MitigationStrategy]] = field(default_factory=dict)
    risk_trends: Dict[str, List[str]] = field(
        default_factory=lambda: {'emerging': [], 'declining': [], 'stable': []}
    )
    regulatory_risks: Dict[str, Any] = field(
        default_factory=lambda: {'applicableRegulations': [], 'complianceGaps': [], 'upcomingRequirements': []}
    )

    @classmethod
    def default(cls) -> 'RiskAssessmentResult':
        return cls()

    def entries(self) -> List[Tuple[str, str, RiskMatrixEntry]]:
        """Flattened (category, risk, entry) triples in taxonomy order."""
        return [
            (category, risk, entry)
            for category, risks in self.matrix.items()
            for risk, entry in risks.items()
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'matrix': {
                category: {risk: entry.to_dict() for risk, entry in risks.items()}
                for category, risks in self.matrix.items()
            },
            'overallRisk': self.overall_risk.to_dict(),
            'materialRisks': [risk.to_dict() for risk in self.material_risks],
            'mitigations': {
                category: [strategy.to_dict() for strategy in strategies]
                for category, strategies in self.mitigations.items()
            },
            'riskTrends': {name: list(values) for name, values in self.risk_trends.items()},
            'regulatoryRisks': {
                name: [dict(item) if isinstance(item, Mapping) else item for item in values]
                for name, values in self.regulatory_risks.items()
            }
        }


@dataclass
class Recommendation:
    """Prioritized improvement action."""
    category: str
    priority: str  # high, medium, low
    action: str
    expected_impact: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'category': self.category,
            'priority': self.priority,
            'action': self.action,
            'expectedImpact': self.expected_impact
        }


@dataclass
class ExecutiveSummary:
    """Headline view of an analytics report."""
    overall_performance: str
    market_position: str
    key_trends: List[str] = field(default_factory=list)
    top_risks: List[str] = field(default_factory=list)
    urgent_actions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'overallPerformance': self.overall_performance,
            'marketPosition': self.market_position,
            'keyTrends': list(self.key_trends),
            'topRisks': list(self.top_risks),
            'urgentActions': list(self.urgent_actions)
        }


@dataclass
class AnalyticsReport:
    """Complete, always-populated output of one analytics run."""
    esg_score: ESGScore
    benchmarking: BenchmarkComparison
    trend_analysis: TrendAnalysisResult
    risk_assessment: RiskAssessmentResult
    summary: ExecutiveSummary
    recommendations: List[Recommendation]
    industry: str = ''
    region: str = 'global'
    degraded_sections: List[str] = field(default_factory=list)
    timestamp: str = field(default_factory=utc_timestamp)

    @property
    def is_degraded(self) -> bool:
        return bool(self.degraded_sections)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp,
            'industry': self.industry,
            'region': self.region,
            'esgScore': self.esg_score.to_dict(),
            'benchmarking': self.benchmarking.to_dict(),
            'trendAnalysis': self.trend_analysis.to_dict(),
            'riskAssessment': self.risk_assessment.to_dict(),
            'summary': self.summary.to_dict(),
            'recommendations': [recommendation.to_dict() for recommendation in self.recommendations],
            'degradedSections': list(self.degraded_sections)
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
