#!/usr/bin/env python3
"""
Engine Events - Fire-and-forget notifications of engine outcomes.

The engine publishes events (unlock succeeded, quota exhausted) after the
triggering unit of work commits. Delivery is best effort: publishing never
raises, never blocks on a consumer and is never retried by the engine.

Usage:
    publisher = EventPublisher(config.notifications)
    publisher.subscribe(lambda event: print(event.event_type))
    publisher.publish(EngineEvent.unlock_succeeded("user-1", "opp-1", "credits"))
"""

import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from redis import Redis
from rq import Queue

from core.config_loader import NotificationConfig
from core.utils import utcnow

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    UNLOCK_SUCCEEDED = "unlock_succeeded"
    QUOTA_EXHAUSTED = "quota_exhausted"


@dataclass(frozen=True)
class EngineEvent:
    event_type: EventType
    user_id: str
    data: Dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=utcnow)

    @classmethod
    def unlock_succeeded(cls, user_id: str, opportunity_id: str, method: str, credits_spent: int = 0) -> "EngineEvent":
        return cls(
            event_type=EventType.UNLOCK_SUCCEEDED,
            user_id=user_id,
            data={'opportunity_id': opportunity_id, 'method': method, 'credits_spent': credits_spent}
        )

    @classmethod
    def quota_exhausted(cls, user_id: str, used: int, max_actions: int, next_reset_at: datetime) -> "EngineEvent":
        return cls(
            event_type=EventType.QUOTA_EXHAUSTED,
            user_id=user_id,
            data={'used': used, 'max': max_actions, 'next_reset_at': next_reset_at.isoformat()}
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload['event_type'] = self.event_type.value
        payload['occurred_at'] = self.occurred_at.isoformat()
        return payload


def process_engine_event(payload: Dict[str, Any]) -> None:
    """RQ job entry point for a downstream notification worker."""
    logger.info(f"Engine event {payload.get('event_type')} for user {payload.get('user_id')}: {payload.get('data')}")


class EventPublisher:
    """
    Publishes engine events to in-process subscribers and, when configured,
    to a Redis-backed RQ queue.
    """

    def __init__(self, config: Optional[NotificationConfig] = None):
        self.config = config or NotificationConfig()
        self._subscribers: List[Callable[[EngineEvent], None]] = []
        self.queue = None

        if not self.config.enabled:
            logger.info("Engine events disabled via config")
        elif self.config.use_async_queue:
            redis_url = self.config.redis_url or 'redis://localhost:6379/0'
            try:
                redis_conn = Redis.from_url(redis_url)
                redis_conn.ping()
                self.queue = Queue(self.config.queue_name, connection=redis_conn)
                logger.info(f"Engine events queued on '{self.config.queue_name}'")
            except Exception as e:
                logger.error(f"Redis connection failed: {e}. Engine events will only be logged.")

    def subscribe(self, callback: Callable[[EngineEvent], None]) -> None:
        self._subscribers.append(callback)

    def publish(self, event: EngineEvent) -> None:
        if not self.config.enabled:
            return

        logger.info(f"Engine event {event.event_type.value} for {event.user_id}")

        for callback in self._subscribers:
            try:
                callback(event)
            except Exception as e:
                logger.warning(f"Event subscriber failed for {event.event_type.value}: {e}")

        if self.queue is not None:
            try:
                self.queue.enqueue(process_engine_event, event.to_dict())
            except Exception as e:
                logger.warning(f"Could not enqueue {event.event_type.value} event: {e}")
