"""
Environment variable validator to ensure all required configurations are set.
"""

import logging
import os
import sys
from typing import Any, Dict, List, Tuple

from app.core import config

# Configure logging
logger = logging.getLogger(__name__)

# Critical for application functionality
REQUIRED_ENV_VARS = (
    "SECRET_KEY",
    "FIREBASE_PROJECT_ID",
    "FIREBASE_PRIVATE_KEY",
    "FIREBASE_CLIENT_EMAIL",
    "REDIS_URL",
)

# Have working defaults but usually set per deployment
OPTIONAL_ENV_VARS = (
    "FIRESTORE_DATABASE",
    "LOGOUT_POLICY",
    "SESSION_COOKIE_SECURE",
)


def _is_set(var_name: str) -> bool:
    value = getattr(config, var_name, None) or os.environ.get(var_name)
    return bool(value and str(value).strip())


def validate_environment_variables(strict: bool = True) -> Tuple[bool, List[str]]:
    """
    Validate that all required environment variables are set.

    Args:
        strict: If True, exit on missing required vars. If False, just warn.

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    # Skip validation in test environment
    if config.ENVIRONMENT == "test" or os.environ.get("PYTEST_CURRENT_TEST"):
        return True, []

    errors = [f"Required environment variable '{name}' is not set or empty" for name in REQUIRED_ENV_VARS if not _is_set(name)]
    warnings = [f"Optional environment variable '{name}' is not set, using default" for name in OPTIONAL_ENV_VARS if not os.environ.get(name)]

    if errors:
        logger.error("=" * 80)
        logger.error("ENVIRONMENT VARIABLE VALIDATION FAILED")
        logger.error("=" * 80)
        for error in errors:
            logger.error(error)
        logger.error("Please set the missing environment variables in your .env file")
        logger.error("=" * 80)

    for warning in warnings:
        logger.warning(warning)

    if not errors and not warnings:
        logger.info("All environment variables are properly configured")

    is_valid = len(errors) == 0

    if not is_valid and strict:
        logger.critical("Application cannot start with missing required environment variables")
        logger.critical("Exiting...")
        sys.exit(1)

    return is_valid, errors + warnings


def get_environment_info() -> Dict[str, Any]:
    """Get information about the current environment configuration."""
    return {
        "environment": config.ENVIRONMENT,
        "firebase_configured": bool(config.FIREBASE_PROJECT_ID and config.FIREBASE_PRIVATE_KEY and config.FIREBASE_CLIENT_EMAIL),
        "redis_configured": bool(config.REDIS_URL),
        "secret_key_configured": bool(config.SECRET_KEY),
        "session_cookie_secure": config.SESSION_COOKIE_SECURE,
        "logout_policy": config.LOGOUT_POLICY,
    }


def print_environment_summary():
    """Log a summary of environment configuration."""
    info = get_environment_info()

    logger.info("=" * 80)
    logger.info("ENVIRONMENT CONFIGURATION SUMMARY")
    logger.info("=" * 80)
    logger.info(f"Environment: {info['environment']}")
    logger.info(f"Firebase: {'configured' if info['firebase_configured'] else 'missing'}")
    logger.info(f"Redis: {'configured' if info['redis_configured'] else 'missing'}")
    logger.info(f"Secret Key: {'configured' if info['secret_key_configured'] else 'missing'}")
    logger.info(f"Secure session cookie: {info['session_cookie_secure']}")
    logger.info(f"Logout policy: {info['logout_policy']}")
    logger.info("=" * 80)
