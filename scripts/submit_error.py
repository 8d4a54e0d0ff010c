#!/usr/bin/env python3
"""Submit a single error through the triage pipeline and print the archive.

Usage::

    # Performance issue from a patient (P3)
    python scripts/submit_error.py --category performance --message "slow page"

    # Emergency component failure on an emergency route (P0)
    python scripts/submit_error.py --category emergency_component \\
        --route /emergency/contact --component EmergencyContactForm

    # Custom config file, console logs
    python scripts/submit_error.py --config config/settings.yaml --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

import structlog

from medtriage.context.types import EnvironmentSignals, ErrorHints
from medtriage.core.config import load_settings
from medtriage.core.logging import setup_logging
from medtriage.core.types import Severity
from medtriage.escalation.factory import create_alert_pipeline
from medtriage.escalation.sinks import InMemoryIncidentStore
from medtriage.escalation.types import ReportedError

logger = structlog.get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    """Process one error, then print the history snapshot as JSON."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level, fmt=args.log_format)

    incidents = InMemoryIncidentStore()
    orchestrator = create_alert_pipeline(settings, incidents=incidents)

    hints = ErrorHints(
        category=args.category,
        severity=Severity(args.severity) if args.severity else None,
        persona_hint=args.persona,
        emergency_hint=True if args.emergency else None,
        component_name=args.component,
        route=args.route,
    )
    signals = EnvironmentSignals(route=args.route) if args.route else None
    error = ReportedError(message=args.message, name=args.name)

    try:
        outcome = await orchestrator.process_error(error, hints, signals)
    finally:
        await orchestrator.close()

    logger.info(
        "error_processed",
        alert_id=outcome.alert.id,
        tier=outcome.alert.tier.value,
        delivered=outcome.delivered_count,
        incidents=len(incidents.reports),
    )

    snapshot = [alert.model_dump(mode="json") for alert in orchestrator.history.snapshot()]
    print(json.dumps(snapshot, indent=2))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Submit an error to the medtriage pipeline")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument("--category", default=None, help="Error category code")
    parser.add_argument(
        "--severity",
        choices=[s.value for s in Severity],
        default=None,
        help="Override the category's severity",
    )
    parser.add_argument("--persona", default=None, help="User persona hint")
    parser.add_argument("--emergency", action="store_true", help="Flag an emergency context")
    parser.add_argument("--message", default="Unhandled error", help="Error message")
    parser.add_argument("--name", default="Error", help="Error type name")
    parser.add_argument("--route", default=None, help="Route the error occurred on")
    parser.add_argument("--component", default=None, help="Component name")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override log level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "console"],
        default=None,
        help="Override log renderer",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
