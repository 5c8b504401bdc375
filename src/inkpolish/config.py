"""
Centralized application configuration.

Edit the variables below to configure development settings.
"""

import logging

# =============================================================================
# DEVELOPMENT SETTINGS - Edit these for local development
# =============================================================================
LOG_LEVEL = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_TO_CONSOLE = False  # Set to True to output logs to terminal
# =============================================================================

# =============================================================================
# ENHANCEMENT PIPELINE
# =============================================================================
RATE_LIMIT_INTERVAL_SECONDS = 1.0  # Minimum spacing between provider requests
REQUEST_TIMEOUT_SECONDS = 30.0  # Upper bound for a single provider request
CONTEXT_READ_TIMEOUT_SECONDS = 1.0  # Clipboard / selection subprocess timeout
# =============================================================================


def get_log_level() -> int:
    """Get the logging level as an integer."""
    return getattr(logging, LOG_LEVEL.upper(), logging.INFO)
