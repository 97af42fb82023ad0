"""
Startup warm-up for the backing services.

Opens the Firestore channel and the Redis pool before the first request so
the first signup or admin navigation does not pay for connection setup.
"""

import logging
from typing import Dict, Optional

from app.core.async_redis import async_redis_client
from app.core.utils import get_current_timestamp
from app.services.firebase import firebase_service

# Configure logging
logger = logging.getLogger(__name__)


class ServiceWarmup:
    """Tracks whether each backing service answered during warm-up."""

    def __init__(self, store=None, redis=None):
        self.store = store or firebase_service
        self.redis = redis or async_redis_client
        self.warmed_at: Optional[str] = None
        self.ready: Dict[str, bool] = {"firebase": False, "redis": False}

    async def warm_up(self) -> Dict[str, bool]:
        """Ping every backing service once; failures are logged, never raised."""
        try:
            self.ready["firebase"] = await self.store.health_check()
        except Exception as e:
            logger.warning(f"Firestore warm-up failed: {e}")
            self.ready["firebase"] = False

        try:
            self.ready["redis"] = await self.redis.ping()
        except Exception as e:
            logger.warning(f"Redis warm-up failed: {e}")
            self.ready["redis"] = False

        self.warmed_at = get_current_timestamp()
        for name, ok in self.ready.items():
            if ok:
                logger.info(f"{name} connection warmed up")
            else:
                logger.warning(f"{name} did not answer during warm-up; first requests may be slow or fail")
        return dict(self.ready)


# Global instance
service_warmup = ServiceWarmup()
