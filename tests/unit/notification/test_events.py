#!/usr/bin/env python3
"""
Tests for engine event publishing.

Publishing is fire-and-forget: subscriber and queue failures are logged
and never reach the caller.
"""

import unittest
from datetime import datetime, timezone
from unittest.mock import Mock, patch

from core.config_loader import NotificationConfig
from notification import EngineEvent, EventPublisher, EventType, process_engine_event


class TestEngineEvent(unittest.TestCase):

    def test_unlock_succeeded_payload(self):
        event = EngineEvent.unlock_succeeded("u1", "opp-1", "credits", 5)
        payload = event.to_dict()

        self.assertEqual(payload['event_type'], "unlock_succeeded")
        self.assertEqual(payload['user_id'], "u1")
        self.assertEqual(payload['data'], {'opportunity_id': "opp-1", 'method': "credits", 'credits_spent': 5})
        self.assertIsInstance(payload['occurred_at'], str)

    def test_quota_exhausted_payload(self):
        reset_at = datetime(2026, 4, 1, tzinfo=timezone.utc)
        event = EngineEvent.quota_exhausted("u1", 4, 4, reset_at)

        self.assertEqual(event.event_type, EventType.QUOTA_EXHAUSTED)
        self.assertEqual(event.data['next_reset_at'], reset_at.isoformat())

    def test_worker_job_accepts_payload(self):
        process_engine_event(EngineEvent.unlock_succeeded("u1", "opp-1", "tier").to_dict())


class TestEventPublisher(unittest.TestCase):

    def test_subscribers_receive_events(self):
        publisher = EventPublisher(NotificationConfig())
        received = []
        publisher.subscribe(received.append)

        event = EngineEvent.unlock_succeeded("u1", "opp-1", "tier")
        publisher.publish(event)

        self.assertEqual(received, [event])

    def test_failing_subscriber_is_swallowed(self):
        publisher = EventPublisher(NotificationConfig())
        publisher.subscribe(Mock(side_effect=RuntimeError("down")))
        received = []
        publisher.subscribe(received.append)

        publisher.publish(EngineEvent.unlock_succeeded("u1", "opp-1", "tier"))

        self.assertEqual(len(received), 1)

    def test_disabled_publisher_drops_events(self):
        publisher = EventPublisher(NotificationConfig(enabled=False))
        callback = Mock()
        publisher.subscribe(callback)

        publisher.publish(EngineEvent.unlock_succeeded("u1", "opp-1", "tier"))

        callback.assert_not_called()

    @patch('notification.events.Queue')
    @patch('notification.events.Redis')
    def test_async_queue_enqueues(self, mock_redis, mock_queue):
        publisher = EventPublisher(NotificationConfig(use_async_queue=True, redis_url="redis://localhost:6379/0"))
        event = EngineEvent.unlock_succeeded("u1", "opp-1", "credits", 5)

        publisher.publish(event)

        mock_redis.from_url.assert_called_once_with("redis://localhost:6379/0")
        mock_queue.assert_called_once()
        mock_queue.return_value.enqueue.assert_called_once_with(process_engine_event, event.to_dict())

    @patch('notification.events.Redis')
    def test_unreachable_redis_falls_back_to_logging(self, mock_redis):
        mock_redis.from_url.return_value.ping.side_effect = ConnectionError("refused")

        publisher = EventPublisher(NotificationConfig(use_async_queue=True))

        self.assertIsNone(publisher.queue)
        publisher.publish(EngineEvent.unlock_succeeded("u1", "opp-1", "tier"))

    @patch('notification.events.Queue')
    @patch('notification.events.Redis')
    def test_enqueue_failure_does_not_raise(self, mock_redis, mock_queue):
        mock_queue.return_value.enqueue.side_effect = RuntimeError("queue full")
        publisher = EventPublisher(NotificationConfig(use_async_queue=True))

        publisher.publish(EngineEvent.unlock_succeeded("u1", "opp-1", "tier"))


if __name__ == '__main__':
    unittest.main()
