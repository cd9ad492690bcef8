#!/usr/bin/env python3
"""
Integration Tests for the Analytics Orchestrator

Tests for complete report generation, per-engine fault isolation, the
executive summary and recommendation ranking.

Author: ESG Analytics Team
Version: 1.0.0
"""

import asyncio
import json
import logging
import unittest
from unittest.mock import patch

from tests.base_test import BaseTestCase

from analytics.benchmarking_engine import BenchmarkingEngine
from analytics.dashboard import AnalyticsOrchestrator, EngineResult
from analytics.esg_types import (
    BenchmarkComparison, ESGScore, RiskAssessmentResult, RiskMatrixEntry,
    TrendAnalysisResult, TrendResult
)
from analytics.risk_assessment import RiskAssessment
from analytics.score_calculator import ScoreCalculator
from analytics.trend_analysis import TrendAnalysis
from utils.logging_utils import AnalyticsLogger, LogConfig


SCENARIO_A = {
    'environmental': {'carbonIntensity': 20},
    'social': {'employeeSatisfaction': 80},
    'governance': {'boardIndependence': 90}
}


class TestAnalyticsOrchestrator(BaseTestCase):
    """Test cases for AnalyticsOrchestrator."""

    def setUp(self):
        """Set up test fixtures."""
        super().setUp()
        self.orchestrator = AnalyticsOrchestrator(self.reference_data)
        self.history = self.mock_data.generate_linear_history(1.0)

    def test_scenario_a_report(self):
        """A healthy run fills every section and reports no degradation."""
        report = self.orchestrator.generate_report(SCENARIO_A, 'technology', 'global', self.history)

        self.assert_report_complete(report)
        self.assertEqual(report.esg_score.overall_score, 58)
        self.assertEqual(report.esg_score.grade, 'D')
        self.assertEqual(report.benchmarking.environmental.gap, -17.5)
        self.assertEqual(report.trend_analysis.trends['social'].direction, 'improving')
        self.assertEqual(len(report.risk_assessment.entries()), 12)
        self.assertEqual(report.degraded_sections, [])
        self.assertFalse(report.is_degraded)

    def test_empty_input_report(self):
        report = self.orchestrator.generate_report({}, 'technology')

        self.assertEqual(report.esg_score.overall_score, 50)
        for trend in report.trend_analysis.trends.values():
            self.assertEqual(trend, TrendResult.default())
        self.assertEqual(report.degraded_sections, [])

    def test_oversized_metric_does_not_degrade(self):
        company = {
            'environmental': {'carbonIntensity': 10 ** 400},
            'social': {'employeeSatisfaction': 80},
            'governance': {'boardIndependence': 90}
        }

        report = self.orchestrator.generate_report(company, 'technology')

        self.assertEqual(report.degraded_sections, [])
        self.assertEqual(report.esg_score.category_scores['environmental'], 50.0)
        self.assertEqual(len(report.risk_assessment.entries()), 12)

    def test_benchmark_failure_is_isolated(self):
        """A failing benchmark falls back to its default; other sections are untouched."""
        healthy = self.orchestrator.generate_report(SCENARIO_A, 'technology', 'global', self.history)

        with patch.object(BenchmarkingEngine, 'compare', side_effect=RuntimeError('benchmark data corrupt')):
            with self.assertLogs('esg_analytics.engines', level='WARNING') as captured:
                report = self.orchestrator.generate_report(SCENARIO_A, 'technology', 'global', self.history)

        self.assertEqual(report.benchmarking, BenchmarkComparison.default('technology', 'global'))
        self.assertEqual(report.degraded_sections, ['benchmarking'])
        self.assertTrue(any('benchmarking failed: benchmark data corrupt' in line for line in captured.output))

        self.assertEqual(report.esg_score.overall_score, healthy.esg_score.overall_score)
        self.assertEqual(report.esg_score.category_scores, healthy.esg_score.category_scores)
        self.assertEqual(report.trend_analysis, healthy.trend_analysis)
        self.assertEqual(report.risk_assessment.to_dict(), healthy.risk_assessment.to_dict())
        self.assertEqual(report.summary.market_position, '0th percentile in industry')

    def test_score_failure_uses_default_score(self):
        with patch.object(ScoreCalculator, 'calculate', side_effect=ValueError('bad metrics')):
            report = self.orchestrator.generate_report(SCENARIO_A, 'technology')

        self.assertEqual(report.esg_score.overall_score, 0)
        self.assertEqual(report.esg_score.grade, 'N/A')
        self.assertEqual(report.degraded_sections, ['scoreCalculator'])
        self.assertEqual(report.summary.overall_performance, 'ESG Score: 0/100 (N/A)')

    def test_every_engine_failing_still_reports(self):
        with patch.object(ScoreCalculator, 'calculate', side_effect=RuntimeError('a')), \
                patch.object(BenchmarkingEngine, 'compare', side_effect=RuntimeError('b')), \
                patch.object(TrendAnalysis, 'analyze_trends', side_effect=RuntimeError('c')), \
                patch.object(RiskAssessment, 'assess', side_effect=RuntimeError('d')):
            report = self.orchestrator.generate_report(SCENARIO_A, 'technology')

        self.assert_report_complete(report)
        self.assertEqual(
            report.degraded_sections,
            ['scoreCalculator', 'benchmarking', 'trendAnalysis', 'riskAssessment']
        )
        self.assertEqual(report.trend_analysis, TrendAnalysisResult.default())
        self.assertEqual(report.risk_assessment.overall_risk.level, 'unknown')

    def test_invalid_input_never_raises(self):
        """A non-mapping input degrades the sections that need it."""
        report = self.orchestrator.generate_report('not a company', 'technology')

        self.assert_report_complete(report)
        self.assertEqual(report.degraded_sections, ['scoreCalculator', 'riskAssessment'])
        self.assertEqual(report.esg_score.overall_score, 0)
        self.assertEqual(report.esg_score.grade, 'N/A')
        self.assertEqual(report.esg_score.category_scores, ESGScore.default().category_scores)

    def test_missing_industry_never_raises(self):
        report = self.orchestrator.generate_report(SCENARIO_A, '')

        self.assertEqual(report.degraded_sections, ['benchmarking', 'riskAssessment'])
        self.assertEqual(report.industry, '')
        self.assertEqual(report.esg_score.overall_score, 58)

    def test_history_from_input(self):
        """Historical data embedded in the input is used when none is passed."""
        company = dict(SCENARIO_A, historicalData=self.history)
        report = self.orchestrator.generate_report(company, 'technology')

        self.assertEqual(report.trend_analysis.trends['environmental'].data_points, 12)

    def test_explicit_window(self):
        report = self.orchestrator.generate_report(SCENARIO_A, 'technology', history=self.history, window_months=4)
        self.assertEqual(report.trend_analysis.trends['governance'].data_points, 4)

    def test_invalid_window_degrades_trends(self):
        report = self.orchestrator.generate_report(SCENARIO_A, 'technology', history=self.history, window_months=0)

        self.assertEqual(report.degraded_sections, ['trendAnalysis'])
        self.assertEqual(report.trend_analysis, TrendAnalysisResult.default())

    def test_scenario_a_summary(self):
        report = self.orchestrator.generate_report(SCENARIO_A, 'technology')

        self.assertEqual(report.summary.overall_performance, 'ESG Score: 58/100 (D)')
        self.assertEqual(report.summary.market_position, '6th percentile in industry')
        self.assertEqual(report.summary.top_risks, [])
        self.assertEqual(report.summary.urgent_actions, [])

    def test_scenario_a_recommendations(self):
        """High-priority items come first; equal priorities keep discovery order."""
        report = self.orchestrator.generate_report(SCENARIO_A, 'technology')
        actions = [(item.priority, item.action) for item in report.recommendations]

        self.assertEqual(actions, [
            ('high', 'Implement comprehensive environmental improvement program'),
            ('high', 'Implement comprehensive social improvement program'),
            ('medium', 'Close 17.5 point gap in environmental'),
            ('medium', 'Close 24.5 point gap in social'),
            ('medium', 'Close 28.0 point gap in governance'),
            ('medium', 'Close 23.7 point gap in overall'),
        ])

    def test_high_risk_report(self):
        """Critical risks surface in the summary and recommendations."""
        report = self.orchestrator.generate_report(self.mock_data.generate_company_input(10), 'energy')

        self.assertEqual(report.summary.top_risks, ['climate_change', 'resource_scarcity', 'pollution'])
        self.assertEqual(report.summary.urgent_actions, ['Address climate change immediately'])

        priorities = [item.priority for item in report.recommendations]
        self.assertEqual(priorities, ['high'] * 6 + ['medium'] * 4)
        self.assertEqual(report.recommendations[3].action, 'Mitigate climate change exposure')
        self.assertEqual(report.recommendations[3].expected_impact, 'Reduced ESG risk profile')

    def test_declining_trend_is_urgent(self):
        history = self.mock_data.generate_history('environmental', [70.0 - 0.2 * i for i in range(12)])
        report = self.orchestrator.generate_report(SCENARIO_A, 'technology', history=history)

        self.assertIn('Reverse declining environmental performance', report.summary.urgent_actions)
        self.assertIn('environmental: declining (moderate confidence)', report.summary.key_trends)

    def test_urgent_actions_are_capped(self):
        entry = RiskMatrixEntry(probability=0.95, impact=0.9, risk_score=0.855,
                                risk_level='critical', mitigation_status='planned')
        risks = RiskAssessmentResult(matrix={
            'environmental': {name: entry for name in ('a', 'b', 'c', 'd')},
            'social': {name: entry for name in ('e', 'f', 'g')}
        })

        summary = AnalyticsOrchestrator.generate_executive_summary(
            ESGScore.default(), BenchmarkComparison.default(), TrendAnalysisResult.default(), risks
        )

        self.assertEqual(len(summary.urgent_actions), 5)
        self.assertEqual(summary.urgent_actions[0], 'Address a immediately')

    def test_recommendations_tolerate_defaults(self):
        recommendations = AnalyticsOrchestrator.generate_recommendations(
            ESGScore(overall_score=0, category_scores={}, grade='N/A'),
            BenchmarkComparison.default(),
            RiskAssessmentResult.default()
        )
        self.assertEqual(recommendations, [])

    def test_report_json(self):
        report = self.orchestrator.generate_report(SCENARIO_A, 'Technology', 'EU', self.history)
        payload = json.loads(report.to_json())

        self.assertEqual(payload['industry'], 'technology')
        self.assertEqual(payload['region'], 'eu')
        self.assertEqual(payload['esgScore']['overallScore'], 58)
        self.assertEqual(payload['benchmarking']['environmental']['status'], 'laggard')
        self.assertEqual(payload['riskAssessment']['regulatoryRisks']['applicableRegulations'][0], 'CSRD')
        self.assertEqual(payload['degradedSections'], [])

    def test_engine_result(self):
        ok = EngineResult('scoreCalculator', value=1)
        failed = EngineResult('scoreCalculator', error=RuntimeError('x'))

        self.assertTrue(ok.ok)
        self.assertEqual(ok.value_or(lambda: 0), 1)
        self.assertFalse(failed.ok)
        self.assertEqual(failed.value_or(lambda: 0), 0)


class TestAsyncReport(BaseTestCase):
    """Test cases for concurrent report generation."""

    def setUp(self):
        """Set up test fixtures."""
        super().setUp()
        self.orchestrator = AnalyticsOrchestrator(self.reference_data)
        self.history = self.mock_data.generate_linear_history(-1.0)

    def test_async_matches_sync(self):
        sync_report = self.orchestrator.generate_report(SCENARIO_A, 'technology', 'global', self.history)
        async_report = asyncio.run(
            self.orchestrator.generate_report_async(SCENARIO_A, 'technology', 'global', self.history)
        )

        self.assertEqual(async_report.esg_score.overall_score, sync_report.esg_score.overall_score)
        self.assertEqual(async_report.benchmarking, sync_report.benchmarking)
        self.assertEqual(async_report.trend_analysis, sync_report.trend_analysis)
        self.assertEqual(async_report.risk_assessment.to_dict(), sync_report.risk_assessment.to_dict())
        self.assertEqual(async_report.recommendations, sync_report.recommendations)

    def test_async_fault_isolation(self):
        with patch.object(RiskAssessment, 'assess', side_effect=RuntimeError('matrix failure')):
            report = asyncio.run(self.orchestrator.generate_report_async(SCENARIO_A, 'technology'))

        self.assertEqual(report.degraded_sections, ['riskAssessment'])
        self.assertEqual(report.esg_score.overall_score, 58)
        self.assertEqual(report.risk_assessment.overall_risk.score, 0)


class TestOrchestratorLogging(BaseTestCase):
    """Test cases for engine timing and failure logging."""

    def setUp(self):
        """Set up test fixtures."""
        super().setUp()
        self.analytics_logger = AnalyticsLogger(LogConfig(console_logging=False, log_level='WARNING'))
        self.orchestrator = AnalyticsOrchestrator(self.reference_data, analytics_logger=self.analytics_logger)

    def test_engines_are_timed(self):
        self.orchestrator.generate_report(SCENARIO_A, 'technology')
        operations = self.analytics_logger.get_performance_summary()['operations']

        for engine in ('scoreCalculator', 'benchmarking', 'trendAnalysis', 'riskAssessment'):
            self.assertEqual(operations[engine]['count'], 1)

    def test_engine_failure_is_logged_once(self):
        with patch.object(TrendAnalysis, 'analyze_trends', side_effect=ValueError('history unreadable')):
            with self.assertLogs(level='WARNING') as captured:
                report = self.orchestrator.generate_report(SCENARIO_A, 'technology')

        self.assertEqual(report.degraded_sections, ['trendAnalysis'])
        failures = [record for record in captured.records if 'history unreadable' in record.getMessage()]
        self.assertEqual(len(failures), 1)
        self.assertEqual(failures[0].getMessage(), 'trendAnalysis failed: history unreadable')
        self.assertEqual(failures[0].levelno, logging.WARNING)
        self.assertFalse(any(record.levelno >= logging.ERROR for record in captured.records))

    def test_degraded_report_is_logged(self):
        with self.assertLogs('esg_analytics.reports', level='WARNING') as captured:
            self.orchestrator.generate_report(SCENARIO_A, '')

        self.assertIn('Report generated for /global', captured.output[0])


if __name__ == '__main__':
    unittest.main()
