from .bus import EventBus
from .hookspecs import InventoryHookSpec, hookimpl

__all__ = [
     "EventBus",
     "InventoryHookSpec",
     "hookimpl",
]
