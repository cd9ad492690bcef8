#!/usr/bin/env python3
"""
Configuration Management System

Centralized configuration management for the ESG analytics pipeline.
Handles environment detection, analytics parameters, logging settings and the
static reference tables (industry benchmarks, risk matrices, action templates).

Features:
- Environment-specific configurations (dev, staging, prod, testing)
- YAML configuration files with environment variable overrides
- Immutable reference data loaded once per path
- Configuration validation and export

Author: ESG Analytics Team
Version: 1.0.0
"""

import os
import logging
from dataclasses import dataclass, asdict, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from utils.logging_utils import LogConfig


CONFIG_DIR = Path(__file__).parent
DEFAULT_REFERENCE_DATA_PATH = CONFIG_DIR / 'reference_data.yaml'

VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class Environment(Enum):
    """Environment types."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


@dataclass
class AnalyticsConfig:
    """Analytics pipeline configuration."""
    default_industry: str = "manufacturing"
    default_region: str = "global"
    trend_window_months: int = 12
    prediction_horizons: Dict[str, int] = None
    reference_data_path: Optional[str] = None

    def __post_init__(self):
        if self.prediction_horizons is None:
            self.prediction_horizons = {
                'nextQuarter': 3,
                'nextYear': 12
            }


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "colored"  # 'json', 'text', 'colored'
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    console_logging: bool = True

    # Performance tracking
    performance_logging: bool = False
    performance_file: Optional[str] = None
    error_file: Optional[str] = None


@dataclass(frozen=True)
class ReferenceData:
    """Read-only static tables consumed by the analytics engines."""
    industry_benchmarks: Mapping[str, Mapping[str, float]]
    default_benchmark_industry: str
    fallback_benchmark_score: float
    metric_ranges: Mapping[str, Mapping[str, Mapping[str, Any]]]
    risk_impact: Mapping[str, Mapping[str, float]]
    default_risk_impact: float
    industry_risk_multipliers: Mapping[str, Mapping[str, float]]
    mitigation_actions: Mapping[str, Tuple[str, ...]]
    default_mitigation_actions: Tuple[str, ...]
    stakeholder_impact: Mapping[str, Tuple[str, ...]]
    default_stakeholders: Tuple[str, ...]
    regulatory_landscape: Mapping[str, Tuple[str, ...]]
    compliance_gaps: Tuple[str, ...]
    upcoming_requirements: Tuple[Mapping[str, str], ...]
    risk_trends: Mapping[str, Tuple[str, ...]]
    best_practices: Tuple[str, ...] = field(default_factory=tuple)


def _freeze(value: Any) -> Any:
    """Recursively convert dicts to read-only mappings and lists to tuples."""
    if isinstance(value, dict):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


@lru_cache(maxsize=None)
def load_reference_data(path: Optional[str] = None) -> ReferenceData:
    """Load the reference tables from YAML.

    The result is cached per path, so the tables are parsed once per process.

    Args:
        path: YAML file path; the bundled tables are used when omitted

    Returns:
        Frozen ReferenceData instance
    """
    source = Path(path) if path else DEFAULT_REFERENCE_DATA_PATH

    with open(source, 'r') as f:
        raw = yaml.safe_load(f) or {}

    known_fields = ReferenceData.__dataclass_fields__.keys()
    missing = [name for name in known_fields if name not in raw and name != 'best_practices']
    if missing:
        raise ValueError(f"Reference data {source} is missing tables: {', '.join(missing)}")

    frozen = {name: _freeze(raw[name]) for name in known_fields if name in raw}
    logging.getLogger(__name__).debug(f"Loaded reference data from {source}")

    return ReferenceData(**frozen)


def get_reference_data() -> ReferenceData:
    """Reference data selected by the global configuration."""
    return load_reference_data(get_config().analytics.reference_data_path)


class ConfigManager:
    """Configuration manager for the ESG analytics pipeline."""

    def __init__(self, config_dir: Optional[str] = None, environment: Optional[Environment] = None):
        """
        Initialize configuration manager.

        Args:
            config_dir: Directory containing configuration files
            environment: Target environment (dev, staging, prod, testing)
        """
        self.config_dir = Path(config_dir) if config_dir else CONFIG_DIR
        self.environment = environment or self._detect_environment()
        self.logger = logging.getLogger(__name__)

        # Configuration components
        self.analytics: AnalyticsConfig = AnalyticsConfig()
        self.logging: LoggingConfig = LoggingConfig()

        # Load configurations
        self._load_configurations()

    def _detect_environment(self) -> Environment:
        """Detect current environment from environment variables."""
        env_name = os.getenv('ESG_ANALYTICS_ENV', 'development').lower()

        env_mapping = {
            'dev': Environment.DEVELOPMENT,
            'development': Environment.DEVELOPMENT,
            'staging': Environment.STAGING,
            'stage': Environment.STAGING,
            'prod': Environment.PRODUCTION,
            'production': Environment.PRODUCTION,
            'test': Environment.TESTING,
            'testing': Environment.TESTING
        }

        return env_mapping.get(env_name, Environment.DEVELOPMENT)

    def _load_configurations(self):
        """Load configurations from files and environment variables."""
        # Load base configuration
        self._load_config_file('base.yaml')

        # Load environment-specific configuration
        self._load_config_file(f'{self.environment.value}.yaml')

        # Override with environment variables
        self._load_environment_variables()

    def _load_config_file(self, filename: str):
        """Load configuration from YAML file."""
        config_file = self.config_dir / filename

        if not config_file.exists():
            self.logger.info(f"Configuration file {filename} not found, using defaults")
            return

        try:
            with open(config_file, 'r') as f:
                config_data = yaml.safe_load(f)

            if config_data:
                self._update_configurations(config_data)

        except (yaml.YAMLError, OSError) as e:
            self.logger.error(f"Error loading configuration file {filename}: {e}")

    def _update_configurations(self, config_data: Dict[str, Any]):
        """Update configuration objects with loaded data."""
        if 'analytics' in config_data:
            self._update_dataclass(self.analytics, config_data['analytics'])

        if 'logging' in config_data:
            self._update_dataclass(self.logging, config_data['logging'])

    def _update_dataclass(self, obj: Any, data: Dict[str, Any]):
        """Update dataclass object with dictionary data."""
        if not isinstance(data, dict):
            self.logger.warning(f"Ignoring non-mapping section for {type(obj).__name__}")
            return

        for key, value in data.items():
            if hasattr(obj, key):
                setattr(obj, key, value)

    def _load_environment_variables(self):
        """Load configuration from environment variables."""
        if os.getenv('ESG_DEFAULT_INDUSTRY'):
            self.analytics.default_industry = os.getenv('ESG_DEFAULT_INDUSTRY')

        if os.getenv('ESG_DEFAULT_REGION'):
            self.analytics.default_region = os.getenv('ESG_DEFAULT_REGION')

        if os.getenv('ESG_TREND_WINDOW_MONTHS'):
            try:
                self.analytics.trend_window_months = int(os.getenv('ESG_TREND_WINDOW_MONTHS'))
            except ValueError:
                self.logger.warning(
                    f"Ignoring non-integer ESG_TREND_WINDOW_MONTHS={os.getenv('ESG_TREND_WINDOW_MONTHS')!r}"
                )

        if os.getenv('ESG_REFERENCE_DATA_PATH'):
            self.analytics.reference_data_path = os.getenv('ESG_REFERENCE_DATA_PATH')

        # Logging configuration
        if os.getenv('LOG_LEVEL'):
            self.logging.level = os.getenv('LOG_LEVEL')

        if os.getenv('LOG_FILE_PATH'):
            self.logging.file_path = os.getenv('LOG_FILE_PATH')

    def get_reference_data(self) -> ReferenceData:
        """Reference tables for this configuration."""
        return load_reference_data(self.analytics.reference_data_path)

    def get_log_config(self) -> LogConfig:
        """Translate the logging section into a LogConfig."""
        return LogConfig(
            log_level=self.logging.level,
            log_format=self.logging.format,
            log_file=self.logging.file_path,
            max_file_size=self.logging.max_file_size,
            backup_count=self.logging.backup_count,
            console_logging=self.logging.console_logging,
            console_level=self.logging.level,
            performance_logging=self.logging.performance_logging,
            performance_file=self.logging.performance_file,
            error_file=self.logging.error_file,
            environment=self.environment.value
        )

    def validate_configuration(self) -> Dict[str, list]:
        """Validate configuration and return any issues."""
        issues = {
            'errors': [],
            'warnings': []
        }

        window = self.analytics.trend_window_months
        if not isinstance(window, int) or isinstance(window, bool) or window < 1:
            issues['errors'].append("Trend window must be a positive number of months")

        for name, months in (self.analytics.prediction_horizons or {}).items():
            if not isinstance(months, (int, float)) or months <= 0:
                issues['errors'].append(f"Prediction horizon {name} must be positive")

        if str(self.logging.level).upper() not in VALID_LOG_LEVELS:
            issues['errors'].append(f"Unknown log level: {self.logging.level}")

        try:
            reference = self.get_reference_data()
        except (OSError, yaml.YAMLError, ValueError) as e:
            issues['errors'].append(f"Reference data could not be loaded: {e}")
        else:
            if self.analytics.default_industry.lower() not in reference.industry_benchmarks:
                issues['warnings'].append(
                    f"Default industry {self.analytics.default_industry} has no benchmark entry"
                )

        return issues

    def export_configuration(self) -> Dict[str, Any]:
        """Export current configuration to dictionary."""
        return {
            'environment': self.environment.value,
            'analytics': asdict(self.analytics),
            'logging': asdict(self.logging)
        }

    def save_configuration(self, filename: str):
        """Save current configuration to file."""
        config_dict = self.export_configuration()

        output_file = self.config_dir / filename

        try:
            with open(output_file, 'w') as f:
                yaml.dump(config_dict, f, default_flow_style=False, indent=2)

            self.logger.info(f"Configuration saved to {output_file}")

        except OSError as e:
            self.logger.error(f"Error saving configuration: {e}")


# Global configuration instance
_config_manager: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Get global configuration manager instance."""
    global _config_manager

    if _config_manager is None:
        _config_manager = ConfigManager()

    return _config_manager


def initialize_config(config_dir: Optional[str] = None,
                      environment: Optional[Environment] = None) -> ConfigManager:
    """Initialize global configuration manager."""
    global _config_manager

    _config_manager = ConfigManager(config_dir, environment)
    return _config_manager
