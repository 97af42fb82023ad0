"""
Retry logic utilities for backing-store calls.
Provides decorators and functions for retrying failed operations.
"""

import logging
import asyncio
import time
from typing import Callable, Optional, Type, Tuple
from functools import wraps

# Configure logging
logger = logging.getLogger(__name__)


def retry_sync(
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable] = None,
):
    """
    Decorator for retrying synchronous functions.

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        delay: Initial delay between retries in seconds (default: 1.0)
        backoff: Multiplier for delay after each retry (default: 2.0)
        exceptions: Tuple of exception types to catch (default: all exceptions)
        on_retry: Optional callback function called on each retry

    Example:
        @retry_sync(max_attempts=3, delay=1.0)
        def my_function():
            # Code that might fail
            pass
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            current_delay = delay

            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts:
                        logger.error(f"Function {func.__name__} failed after {max_attempts} attempts", exc_info=True)
                        raise

                    logger.warning(
                        f"Function {func.__name__} failed (attempt {attempt}/{max_attempts}), "
                        f"retrying in {current_delay}s: {str(e)}"
                    )

                    if on_retry:
                        try:
                            on_retry(attempt, e)
                        except Exception as callback_error:
                            logger.error(f"Retry callback failed: {callback_error}")

                    time.sleep(current_delay)
                    current_delay *= backoff

        return wrapper

    return decorator


def retry_async(
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable] = None,
):
    """
    Decorator for retrying asynchronous functions.

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        delay: Initial delay between retries in seconds (default: 1.0)
        backoff: Multiplier for delay after each retry (default: 2.0)
        exceptions: Tuple of exception types to catch (default: all exceptions)
        on_retry: Optional callback function called on each retry

    Example:
        @retry_async(max_attempts=3, delay=1.0)
        async def my_async_function():
            # Code that might fail
            pass
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            current_delay = delay

            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts:
                        logger.error(f"Async function {func.__name__} failed after {max_attempts} attempts", exc_info=True)
                        raise

                    logger.warning(
                        f"Async function {func.__name__} failed (attempt {attempt}/{max_attempts}), "
                        f"retrying in {current_delay}s: {str(e)}"
                    )

                    if on_retry:
                        try:
                            if asyncio.iscoroutinefunction(on_retry):
                                await on_retry(attempt, e)
                            else:
                                on_retry(attempt, e)
                        except Exception as callback_error:
                            logger.error(f"Retry callback failed: {callback_error}")

                    await asyncio.sleep(current_delay)
                    current_delay *= backoff

        return wrapper

    return decorator


class RetryConfig:
    """Configuration for retry behavior."""

    # Firebase/Firestore retry configuration
    FIRESTORE_MAX_ATTEMPTS = 3
    FIRESTORE_DELAY = 0.5
    FIRESTORE_BACKOFF = 1.5

    # Redis session registry retry configuration
    REDIS_MAX_ATTEMPTS = 2
    REDIS_DELAY = 0.2
    REDIS_BACKOFF = 2.0


# Convenience decorators with pre-configured settings


def retry_firestore(func: Callable) -> Callable:
    """Retry decorator for Firestore reads; only transient failures are retried."""
    from google.api_core.exceptions import DeadlineExceeded, ServiceUnavailable

    transient = (ServiceUnavailable, DeadlineExceeded)
    return (
        retry_async(
            max_attempts=RetryConfig.FIRESTORE_MAX_ATTEMPTS,
            delay=RetryConfig.FIRESTORE_DELAY,
            backoff=RetryConfig.FIRESTORE_BACKOFF,
            exceptions=transient,
        )(func)
        if asyncio.iscoroutinefunction(func)
        else retry_sync(
            max_attempts=RetryConfig.FIRESTORE_MAX_ATTEMPTS,
            delay=RetryConfig.FIRESTORE_DELAY,
            backoff=RetryConfig.FIRESTORE_BACKOFF,
            exceptions=transient,
        )(func)
    )


def retry_redis(func: Callable) -> Callable:
    """Retry decorator for Redis session registry calls."""
    from redis.exceptions import ConnectionError as RedisConnectionError
    from redis.exceptions import TimeoutError as RedisTimeoutError

    transient = (RedisConnectionError, RedisTimeoutError)
    return (
        retry_async(
            max_attempts=RetryConfig.REDIS_MAX_ATTEMPTS,
            delay=RetryConfig.REDIS_DELAY,
            backoff=RetryConfig.REDIS_BACKOFF,
            exceptions=transient,
        )(func)
        if asyncio.iscoroutinefunction(func)
        else retry_sync(
            max_attempts=RetryConfig.REDIS_MAX_ATTEMPTS,
            delay=RetryConfig.REDIS_DELAY,
            backoff=RetryConfig.REDIS_BACKOFF,
            exceptions=transient,
        )(func)
    )
