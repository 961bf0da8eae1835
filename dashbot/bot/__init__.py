"""
Bot layer: chat commands, selection fulfillment and runtime wiring.
"""
from .commands import FindCommandHandler, parse_find_query
from .fulfillment import FulfillmentOrchestrator
from .runtime import BotRuntime

__all__ = [
    'BotRuntime',
    'FindCommandHandler',
    'FulfillmentOrchestrator',
    'parse_find_query',
]
