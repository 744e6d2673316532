"""
Notification Module

Fire-and-forget engine events for the notification collaborator.

Usage:
    from notification import EventPublisher, EngineEvent

    publisher = EventPublisher(config.notifications)
    publisher.publish(EngineEvent.unlock_succeeded('user123', 'opp456', 'credits', 5))
"""

from notification.events import (
    EngineEvent,
    EventPublisher,
    EventType,
    process_engine_event,
)

__all__ = [
    'EngineEvent',
    'EventPublisher',
    'EventType',
    'process_engine_event',
]
