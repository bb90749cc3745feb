"""CycleSense command-line entry point.

Analyze a JSON profile export (as written by the app's data-management
screen) and print the analysis as JSON:

    cyclesense profile.json --as-of 2024-03-10
    python -m cyclesense.main profile.json
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Sequence

from cyclesense.config import get_settings
from cyclesense.cycles.analyzer import analyze_or_placeholder
from cyclesense.cycles.formatting import describe_phase, describe_regularity
from cyclesense.cycles.results import CycleAnalysis

logger = logging.getLogger("cyclesense")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def analysis_to_dict(analysis: CycleAnalysis) -> dict[str, Any]:
    """Plain-dict view of an analysis, with display descriptions added."""
    data = dataclasses.asdict(analysis)
    data["phase_description"] = describe_phase(analysis.current_phase)
    data["regularity_description"] = describe_regularity(analysis.cycle_regularity)
    return data


def load_profile(path: Path) -> dict[str, Any]:
    """Read a profile export; missing collections default to empty."""
    with path.open("r", encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return {
        "cycles": raw.get("cycles") or [],
        "symptoms": raw.get("symptoms") or [],
        "notes": raw.get("notes") or [],
        "settings": raw.get("settings") or None,
    }


def main(argv: Sequence[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="cyclesense",
        description="Analyze a menstrual cycle profile export.",
    )
    parser.add_argument("profile", type=Path, help="Path to the profile JSON export")
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Reference date (YYYY-MM-DD); defaults to today",
    )
    parser.add_argument("--log-level", default="DEBUG" if settings.debug else settings.log_level)
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    logger.info("%s v%s [%s]", settings.app_name, settings.app_version, settings.environment)

    try:
        profile = load_profile(args.profile)
    except (OSError, ValueError) as exc:
        logger.error("Could not read profile %s: %s", args.profile, exc)
        return 1

    analysis = analyze_or_placeholder(now=args.as_of, **profile)
    json.dump(analysis_to_dict(analysis), sys.stdout, indent=2, default=_json_default)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
