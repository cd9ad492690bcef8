"""
ESG Analytics Engines
Scoring, benchmarking, trend analysis and risk assessment for ESG metrics.
"""

from analytics.benchmarking_engine import BenchmarkingEngine
from analytics.dashboard import AnalyticsOrchestrator, EngineResult
from analytics.esg_types import (
    AnalyticsReport, BenchmarkComparison, CompanyESGInput, ESGScore,
    RiskAssessmentResult, TrendAnalysisResult, TrendResult
)
from analytics.risk_assessment import RiskAssessment
from analytics.score_calculator import ScoreCalculator
from analytics.trend_analysis import TrendAnalysis

__all__ = [
    'AnalyticsOrchestrator',
    'AnalyticsReport',
    'BenchmarkComparison',
    'BenchmarkingEngine',
    'CompanyESGInput',
    'ESGScore',
    'EngineResult',
    'RiskAssessment',
    'RiskAssessmentResult',
    'ScoreCalculator',
    'TrendAnalysis',
    'TrendAnalysisResult',
    'TrendResult',
]
