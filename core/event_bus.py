"""
Event bus for lead-pipeline events.

Synchronous in-process pub/sub. Handlers execute in the publisher's thread;
routes publish from a background task so handlers run after the response
has been sent. Handler errors are logged but never propagate: the lead row
and its audit entry have already committed.
"""

import logging
from typing import Callable, Dict, List

from core.events import DomainEvent

logger = logging.getLogger(__name__)


class EventBus:
    """
    In-process event bus.

    Subscribe by event class name (string), publish by event instance.
    Handlers are called synchronously in subscription order.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}

    def subscribe(self, event_type: str, callback: Callable):
        """
        Subscribe to events of a specific type.

        Args:
            event_type: Name of event class to subscribe to (e.g. 'LeadCreated')
            callback: Function to call when event is published
        """
        self._subscribers.setdefault(event_type, []).append(callback)

    def subscriber_count(self, event_type: str) -> int:
        return len(self._subscribers.get(event_type, []))

    def publish(self, event: DomainEvent):
        """
        Publish an event to all subscribers of that type.

        One failing handler does not stop the others.

        Args:
            event: DomainEvent instance to publish
        """
        event_type = event.__class__.__name__

        for callback in self._subscribers.get(event_type, []):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Handler %s failed for %s (event_id=%s)",
                    getattr(callback, "__name__", repr(callback)),
                    event_type,
                    event.event_id,
                )
