#!/usr/bin/env python3
"""
Test Suite for the ESG Analytics Pipeline

This package contains tests for the scoring, benchmarking, trend and risk
engines, the report orchestrator, the shared utilities and the CLI.

Test Structure:
- Unit tests for individual engines and helpers
- Integration tests for complete reports
- CLI tests through click's CliRunner

Author: ESG Analytics Team
Version: 1.0.0
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Quiet configuration for every ConfigManager created during tests
os.environ.setdefault('ESG_ANALYTICS_ENV', 'testing')

# Test configuration
TEST_CONFIG = {
    'logging': {
        'level': 'WARNING',  # Reduce log noise during tests
        'console_logging': False,
        'file_logging': False,
    },
    'analytics': {
        'industry': 'technology',
        'region': 'global',
        'trend_window_months': 12,
    },
    'tolerances': {
        'normal_cdf': 1e-7,
        'erf': 2e-7,
    }
}
