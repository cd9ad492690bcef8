#!/usr/bin/env python3
"""
ESG Analytics Pipeline
Command line entry point for ESG scoring and analytics reports.

This tool:
1. Scores raw company ESG metrics
2. Benchmarks the score against industry references
3. Analyzes historical trends and projects near-term change
4. Builds a probability x impact risk matrix with mitigation plans

Author: ESG Analytics Team
Date: 2024
"""

import json
import sys
from pathlib import Path
from typing import Any, Optional

import click
from dotenv import load_dotenv
from loguru import logger

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from analytics.dashboard import AnalyticsOrchestrator
from analytics.esg_types import AnalyticsReport, ESGScore
from analytics.score_calculator import ScoreCalculator
from config.config import ConfigManager, Environment, initialize_config
from utils.logging_utils import setup_logging


class ESGAnalyticsApplication:
    """Wires configuration, logging and the analytics engines together."""

    def __init__(self, environment: Optional[str] = None, log_level: Optional[str] = None):
        """Initialize the application.

        Args:
            environment: Environment name overriding ESG_ANALYTICS_ENV
            log_level: Log level overriding the configured level
        """
        env = Environment(environment) if environment else None
        self.config_manager: ConfigManager = initialize_config(environment=env)
        if log_level:
            self.config_manager.logging.level = log_level.upper()

        self.setup_logging()
        self.analytics_logger = setup_logging(self.config_manager.get_log_config())
        self.orchestrator = AnalyticsOrchestrator(
            reference_data=self.config_manager.get_reference_data(),
            analytics_logger=self.analytics_logger
        )

        logger.debug(f"ESG analytics initialized ({self.config_manager.environment.value})")

    def setup_logging(self) -> None:
        """Configure loguru console output for the CLI."""
        logger.remove()
        logger.add(
            sys.stderr,
            level=str(self.config_manager.logging.level).upper(),
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
        )

    def generate_report(self, company_data: Any, industry: Optional[str], region: Optional[str],
                        history: Any = None, window_months: Optional[int] = None) -> AnalyticsReport:
        """Run the full analytics pipeline over one company."""
        analytics = self.config_manager.analytics
        industry = industry or analytics.default_industry
        region = region or analytics.default_region

        logger.info(f"Generating ESG report for {industry}/{region}")
        report = self.orchestrator.generate_report(company_data, industry, region, history, window_months)

        if report.is_degraded:
            logger.warning(f"Report degraded: {', '.join(report.degraded_sections)}")

        return report

    def calculate_score(self, company_data: Any) -> ESGScore:
        """Score one company without the rest of the pipeline."""
        return ScoreCalculator(self.config_manager.get_reference_data()).calculate(company_data)


def _read_json(path: str) -> Any:
    with open(path, 'r') as f:
        return json.load(f)


def _emit(payload: str, output: Optional[str]) -> None:
    if output:
        Path(output).parent.mkdir(parents=True, exist_ok=True)
        Path(output).write_text(payload)
        logger.info(f"Wrote {output}")
    else:
        click.echo(payload)


@click.group()
@click.option('--env', 'environment', type=click.Choice([e.value for e in Environment]),
              default=None, help='Configuration environment')
@click.option('--log-level', default=None, help='Override the configured log level')
@click.pass_context
def cli(ctx, environment, log_level):
    """ESG Analytics Pipeline CLI."""
    load_dotenv()
    ctx.ensure_object(dict)
    ctx.obj['environment'] = environment
    ctx.obj['log_level'] = log_level


@cli.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--industry', default=None, help='Industry benchmark to compare against')
@click.option('--region', default=None, help='Region for the regulatory landscape')
@click.option('--history', 'history_file', type=click.Path(exists=True, dir_okay=False), default=None,
              help='JSON file with historical {category, value, date} records')
@click.option('--window', 'window_months', type=click.IntRange(min=1), default=None,
              help='Trend window in observations')
@click.option('--output', default=None, help='Write the report here instead of stdout')
@click.pass_context
def report(ctx, input_file, industry, region, history_file, window_months, output):
    """Generate a full analytics report for INPUT_FILE."""
    app = ESGAnalyticsApplication(ctx.obj['environment'], ctx.obj['log_level'])

    try:
        company_data = _read_json(input_file)
        history = _read_json(history_file) if history_file else None
    except (OSError, json.JSONDecodeError) as e:
        raise click.ClickException(f"Could not read input: {e}")

    result = app.generate_report(company_data, industry, region, history, window_months)
    _emit(result.to_json(), output)


@cli.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def score(ctx, input_file):
    """Print the ESG score for INPUT_FILE."""
    app = ESGAnalyticsApplication(ctx.obj['environment'], ctx.obj['log_level'])

    try:
        company_data = _read_json(input_file)
    except (OSError, json.JSONDecodeError) as e:
        raise click.ClickException(f"Could not read input: {e}")

    try:
        esg_score = app.calculate_score(company_data)
    except ValueError as e:
        raise click.ClickException(str(e))

    click.echo(json.dumps(esg_score.to_dict(), indent=2))


@cli.command('check-config')
@click.pass_context
def check_config(ctx):
    """Validate the active configuration and reference data."""
    env = Environment(ctx.obj['environment']) if ctx.obj['environment'] else None
    config_manager = initialize_config(environment=env)
    issues = config_manager.validate_configuration()

    for error in issues['errors']:
        click.echo(f"ERROR: {error}")
    for warning in issues['warnings']:
        click.echo(f"WARNING: {warning}")

    if issues['errors']:
        ctx.exit(1)

    click.echo(f"Configuration OK ({config_manager.environment.value})")


if __name__ == '__main__':
    cli()
