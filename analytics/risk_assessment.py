#!/usr/bin/env python3
"""
ESG Risk Matrix and Assessment Engine
Builds a probability x impact matrix over a fixed ESG risk taxonomy.

Probability starts from a baseline driven by the category's composite score,
scaled by an industry multiplier and capped at 0.95. Impact comes from a
(risk, industry) lookup. The matrix feeds the materiality ranking, the
overall risk level and mitigation plans for high and critical risks.

Author: ESG Analytics Team
Version: 1.0.0
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from analytics.esg_types import (
    CompanyESGInput, MaterialRisk, MitigationStrategy, OverallRisk,
    RiskAssessmentResult, RiskMatrixEntry
)
from analytics.score_calculator import ScoreCalculator
from config.config import ReferenceData, get_reference_data
from utils.stats_utils import mean, round_half_up
from utils.validation import normalize_region, require_industry, to_number


RISK_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    'environmental': ('climate_change', 'resource_scarcity', 'pollution', 'biodiversity_loss'),
    'social': ('labor_practices', 'human_rights', 'community_relations', 'product_safety'),
    'governance': ('board_oversight', 'executive_compensation', 'transparency', 'corruption')
}

RISK_LEVELS = ('critical', 'high', 'medium', 'low')

BASELINE_PROBABILITY = 0.3
MAX_PROBABILITY = 0.95
MATERIALITY_THRESHOLD = 0.5


def get_risk_level(risk_score: float) -> str:
    """Risk level for a probability x impact score (boundaries inclusive)."""
    if risk_score >= 0.7:
        return 'critical'
    if risk_score >= 0.5:
        return 'high'
    if risk_score >= 0.3:
        return 'medium'
    return 'low'


class RiskAssessment:
    """ESG risk matrix, materiality and mitigation engine."""

    def __init__(self, reference_data: Optional[ReferenceData] = None,
                 score_calculator: Optional[ScoreCalculator] = None):
        """Initialize the engine.

        Args:
            reference_data: Reference tables; the configured tables are used when omitted
            score_calculator: Calculator providing category composite scores
        """
        self.reference_data = reference_data or get_reference_data()
        self.score_calculator = score_calculator or ScoreCalculator(self.reference_data)
        self.logger = logging.getLogger(__name__)

    def assess(self, company_data: Any, industry: str, region: str = 'global') -> RiskAssessmentResult:
        """Assess ESG risks for a company.

        Args:
            company_data: CompanyESGInput or mapping of category metric maps
            industry: Industry identifier
            region: Region used for the regulatory landscape

        Returns:
            RiskAssessmentResult

        Raises:
            InvalidInputError: If company data is not a mapping or industry is empty
        """
        company = CompanyESGInput.from_dict(company_data)
        industry_key = require_industry(industry)
        region_key = normalize_region(region)

        matrix = self.build_risk_matrix(company, industry_key)
        material_risks = self.assess_materiality(matrix)

        self.logger.debug(f"Assessed {sum(len(risks) for risks in matrix.values())} risks for {industry_key}, "
                          f"{len(material_risks)} material")

        return RiskAssessmentResult(
            matrix=matrix,
            overall_risk=self.calculate_overall_risk(matrix),
            material_risks=material_risks,
            mitigations=self.generate_mitigation_strategies(matrix),
            risk_trends={name: list(values) for name, values in self.reference_data.risk_trends.items()},
            regulatory_risks=self.assess_regulatory_risks(industry_key, region_key)
        )

    def build_risk_matrix(self, company: CompanyESGInput, industry: str) -> Dict[str, Dict[str, RiskMatrixEntry]]:
        """Probability x impact entry for every risk in the taxonomy."""
        matrix = {}

        for category, risks in RISK_CATEGORIES.items():
            composite = self.category_composite(company, category)
            matrix[category] = {}

            for risk in risks:
                probability = self.calculate_risk_probability(composite, risk, industry)
                impact = self.calculate_risk_impact(risk, industry)
                risk_score = probability * impact

                matrix[category][risk] = RiskMatrixEntry(
                    probability=probability,
                    impact=impact,
                    risk_score=risk_score,
                    risk_level=get_risk_level(risk_score),
                    mitigation_status=self.assess_mitigation_status(company, risk)
                )

        return matrix

    def category_composite(self, company: CompanyESGInput, category: str) -> float:
        """Composite 0-100 score for a category.

        An explicit numeric ``score`` in the category map takes precedence over
        the score derived from its metrics.
        """
        explicit = to_number(company.category(category).get('score'))
        if explicit is not None:
            return explicit
        return self.score_calculator.category_score(company, category)

    def calculate_risk_probability(self, composite_score: float, risk: str, industry: str) -> float:
        if composite_score < 50:
            base_probability = 0.8
        elif composite_score < 70:
            base_probability = 0.5
        elif composite_score > 85:
            base_probability = 0.2
        else:
            base_probability = BASELINE_PROBABILITY

        return min(MAX_PROBABILITY, base_probability * self.get_industry_risk_multiplier(industry, risk))

    def calculate_risk_impact(self, risk: str, industry: str) -> float:
        impact = to_number(self.reference_data.risk_impact.get(risk, {}).get(industry))
        return impact if impact is not None else float(self.reference_data.default_risk_impact)

    def get_industry_risk_multiplier(self, industry: str, risk: str) -> float:
        multiplier = to_number(self.reference_data.industry_risk_multipliers.get(industry, {}).get(risk))
        return multiplier if multiplier is not None else 1.0

    @staticmethod
    def assess_mitigation_status(company: CompanyESGInput, risk: str) -> str:
        """``active`` when the company reports a control for the risk."""
        return 'active' if company.controls.get(risk) else 'planned'

    @staticmethod
    def calculate_overall_risk(matrix: Mapping[str, Mapping[str, RiskMatrixEntry]]) -> OverallRisk:
        """Mean risk score across the matrix, with a per-level distribution."""
        scores = [entry.risk_score for risks in matrix.values() for entry in risks.values()]
        if not scores:
            return OverallRisk()

        average = mean(scores)
        distribution = {level: 0 for level in RISK_LEVELS}
        for risks in matrix.values():
            for entry in risks.values():
                distribution[entry.risk_level] += 1

        return OverallRisk(
            score=int(round_half_up(average * 100)),
            level=get_risk_level(average),
            distribution=distribution
        )

    def assess_materiality(self, matrix: Mapping[str, Mapping[str, RiskMatrixEntry]]) -> List[MaterialRisk]:
        """Material risks (score >= 0.5), highest score first; ties keep taxonomy order."""
        material_risks = [
            MaterialRisk(
                category=category,
                risk=risk,
                score=entry.risk_score,
                stakeholder_impact=self.assess_stakeholder_impact(risk),
                business_impact=self.assess_business_impact(entry.risk_score)
            )
            for category, risks in matrix.items()
            for risk, entry in risks.items()
            if entry.risk_score >= MATERIALITY_THRESHOLD
        ]

        return sorted(material_risks, key=lambda item: item.score, reverse=True)

    def assess_stakeholder_impact(self, risk: str) -> List[str]:
        stakeholders = self.reference_data.stakeholder_impact.get(risk, self.reference_data.default_stakeholders)
        return list(stakeholders)

    @staticmethod
    def assess_business_impact(risk_score: float) -> List[str]:
        if risk_score >= 0.7:
            return ['Potential regulatory penalties', 'Reputation damage', 'Investor confidence loss']
        if risk_score >= 0.5:
            return ['Operational disruptions', 'Increased compliance costs']
        return []

    def generate_mitigation_strategies(self, matrix: Mapping[str, Mapping[str, RiskMatrixEntry]]
                                       ) -> Dict[str, List[MitigationStrategy]]:
        """Mitigation plans for every high or critical risk, grouped by category."""
        strategies = {}

        for category, risks in matrix.items():
            strategies[category] = []

            for risk, entry in risks.items():
                if entry.risk_level not in ('critical', 'high'):
                    continue

                critical = entry.risk_level == 'critical'
                strategies[category].append(MitigationStrategy(
                    risk=risk,
                    priority='immediate' if critical else 'high',
                    actions=self.get_mitigation_actions(risk),
                    timeline='3 months' if critical else '6 months',
                    resources=self.estimate_resource_requirements(entry.risk_score)
                ))

        return strategies

    def get_mitigation_actions(self, risk: str) -> List[str]:
        actions = self.reference_data.mitigation_actions.get(risk, self.reference_data.default_mitigation_actions)
        return list(actions)

    @staticmethod
    def estimate_resource_requirements(risk_score: float) -> Dict[str, str]:
        base_effort = risk_score * 100

        if base_effort > 70:
            return {'effort': 'high', 'budget': '$500K+', 'timeline': '12+ months'}
        if base_effort > 40:
            return {'effort': 'medium', 'budget': '$100K-500K', 'timeline': '6-12 months'}
        return {'effort': 'low', 'budget': '<$100K', 'timeline': '3-6 months'}

    def assess_regulatory_risks(self, industry: str, region: str) -> Dict[str, Any]:
        """Applicable regulations for the region (global fallback) and known gaps."""
        landscape = self.reference_data.regulatory_landscape
        regulations = landscape.get(region, landscape.get('global', ()))

        return {
            'applicableRegulations': list(regulations),
            'complianceGaps': list(self.reference_data.compliance_gaps),
            'upcomingRequirements': [dict(item) for item in self.reference_data.upcoming_requirements]
        }
