"""
Event Broker.

FastStream RedisBroker setup with lazy initialization.
The broker is only created the first time an event is published, so
the API runs without Redis while event publishing is disabled.

Usage:
    from notekeeper.backend.events.broker import get_event_broker

    broker = get_event_broker()
"""

from faststream.redis import RedisBroker

from notekeeper.backend.core.logging import get_logger

logger = get_logger(__name__)

_broker: RedisBroker | None = None
_connected = False


def create_event_broker() -> RedisBroker:
    """Create a new RedisBroker using the project's Redis URL."""
    from notekeeper.backend.core.config import get_redis_url

    broker = RedisBroker(get_redis_url())
    logger.info("Event broker created")
    return broker


def get_event_broker() -> RedisBroker:
    """Get the shared event broker (lazy initialization)."""
    global _broker
    if _broker is None:
        _broker = create_event_broker()
    return _broker


async def ensure_connected() -> RedisBroker:
    """Get the shared broker, connecting it on first use."""
    global _connected
    broker = get_event_broker()
    if not _connected:
        await broker.connect()
        _connected = True
    return broker


async def close_event_broker() -> None:
    """Close the broker connection if one was opened."""
    global _broker, _connected
    if _broker is not None and _connected:
        await _broker.close()
        logger.info("Event broker closed")
    _broker = None
    _connected = False
