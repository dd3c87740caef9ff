from typing import Dict, List, Callable, Any
import asyncio
import logging

logger = logging.getLogger(__name__)

EMAIL_SEND_REQUESTED = "email_send_requested"

class EventBus:
    """In-process publish/subscribe used to push side effects off the request path."""

    def __init__(self):
        self._handlers: Dict[str, List[Callable]] = {}

    def subscribe(self, event_type: str, handler: Callable):
        self._handlers.setdefault(event_type, []).append(handler)

    def handlers_for(self, event_type: str) -> List[Callable]:
        return list(self._handlers.get(event_type, []))

    async def publish(self, event_type: str, data: Dict[str, Any]):
        handlers = self.handlers_for(event_type)
        if not handlers:
            logger.debug(f"No handlers registered for event {event_type}")
            return

        tasks = []
        for handler in handlers:
            if asyncio.iscoroutinefunction(handler):
                tasks.append(handler(data))
            else:
                tasks.append(asyncio.to_thread(handler, data))

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                logger.error(f"Error in event handler {handler.__name__} for {event_type}: {result}")

event_bus = EventBus()
