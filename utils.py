"""
Utility functions for the Phone Report dashboard.

This module provides logging, usage metrics tracking, error tracking and the
persisted theme preference.
"""

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, Any

# Setup logging
log_dir = Path(os.environ.get("PHONE_REPORT_LOG_DIR", "logs"))
log_dir.mkdir(parents=True, exist_ok=True)
log_file = log_dir / f"app_{datetime.now().strftime('%Y%m%d')}.log"

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_file),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

# Suppress matplotlib categorical-unit messages for agent names that look like numbers
logging.getLogger('matplotlib.category').setLevel(logging.WARNING)

# Metrics and preference files
metrics_file = log_dir / "usage_metrics.json"
preferences_file = log_dir / "preferences.json"

THEMES = ("light", "dark")


def _empty_metrics() -> Dict[str, Any]:
    return {"sessions": 0, "errors": {}, "features_used": {}, "last_updated": None}


def load_metrics() -> Dict[str, Any]:
    """Load usage metrics from file.

    Returns:
        Dictionary containing session count, errors, feature usage, and last update time.
    """
    if metrics_file.exists():
        try:
            with open(metrics_file, 'r') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load metrics: {e}")
            return _empty_metrics()
    return _empty_metrics()


def save_metrics(metrics: Dict[str, Any]) -> None:
    """Save usage metrics to file.

    Args:
        metrics: Dictionary containing metrics data to save.
    """
    metrics["last_updated"] = datetime.now().isoformat()
    try:
        with open(metrics_file, 'w') as f:
            json.dump(metrics, f, indent=2)
    except OSError as e:
        logger.error(f"Failed to save metrics: {e}")


def record_session_start() -> int:
    """Increment the session counter and return the new total."""
    metrics = load_metrics()
    metrics["sessions"] = metrics.get("sessions", 0) + 1
    save_metrics(metrics)
    logger.info(f"New session started. Total sessions: {metrics['sessions']}")
    return metrics["sessions"]


def track_feature_usage(feature_name: str) -> None:
    """Track feature usage for analytics.

    Args:
        feature_name: Name of the feature being used.
    """
    metrics = load_metrics()
    if "features_used" not in metrics:
        metrics["features_used"] = {}
    metrics["features_used"][feature_name] = metrics["features_used"].get(feature_name, 0) + 1
    save_metrics(metrics)


def track_error(error_type: str, error_message: str) -> None:
    """Track errors for alerting on repeated failures.

    Args:
        error_type: Type/category of the error.
        error_message: Error message or description.
    """
    metrics = load_metrics()
    if "errors" not in metrics:
        metrics["errors"] = {}

    error_key = f"{error_type}:{error_message[:50]}"
    if error_key not in metrics["errors"]:
        metrics["errors"][error_key] = {
            "count": 0,
            "first_seen": datetime.now().isoformat(),
            "last_seen": None
        }

    metrics["errors"][error_key]["count"] += 1
    metrics["errors"][error_key]["last_seen"] = datetime.now().isoformat()
    save_metrics(metrics)

    logger.error(f"{error_type}: {error_message}")

    # Alert on repeated failures (5+ occurrences)
    if metrics["errors"][error_key]["count"] >= 5:
        logger.warning(
            f"ALERT: Repeated failure detected - {error_key} "
            f"(count: {metrics['errors'][error_key]['count']})"
        )


def load_theme_preference() -> str:
    """Return the saved theme, "dark" or "light".

    Anything other than a stored "dark" falls back to "light".
    """
    if not preferences_file.exists():
        return "light"
    try:
        with open(preferences_file, 'r') as f:
            preferences = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to load preferences: {e}")
        return "light"
    return "dark" if preferences.get("theme") == "dark" else "light"


def save_theme_preference(theme: str) -> None:
    """Persist the theme preference across sessions.

    Args:
        theme: Either "dark" or "light".
    """
    if theme not in THEMES:
        raise ValueError(f"Unknown theme: {theme!r}")
    try:
        with open(preferences_file, 'w') as f:
            json.dump({"theme": theme}, f, indent=2)
    except OSError as e:
        logger.error(f"Failed to save preferences: {e}")
