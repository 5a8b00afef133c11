"""Outbound event dispatch via pluggy + ThreadPoolExecutor.

The stock ledger calls ``dispatch()`` after a commit; subscribers are pluggy
plugins implementing the hooks in ``events.hookspecs``. Delivery happens on
a worker pool so a slow subscriber never holds up a stock command.

INVARIANT: Subscriber failures are warnings, never errors.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Optional

import pluggy

from events.hookspecs import PROJECT_NAME, InventoryHookSpec

logger = logging.getLogger(__name__)


class EventBus:
     """Deliver inventory events to registered subscribers.

     Parameters:
          sync: Deliver on the calling thread (tests, scripts).
          max_workers: ThreadPoolExecutor worker count for async delivery.
     """

     def __init__(self, *, sync: bool = False, max_workers: int = 2) -> None:
          self._pm = pluggy.PluginManager(PROJECT_NAME)
          self._pm.add_hookspecs(InventoryHookSpec)
          self._sync = sync
          self._executor: Optional[ThreadPoolExecutor] = (
               None if sync else ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="inventory-events")
          )
          self._futures: list[Future] = []
          self._futures_lock = threading.Lock()

     def register(self, plugin: object, name: Optional[str] = None) -> None:
          """Subscribe a plugin instance."""
          resolved_name = name or plugin.__class__.__name__
          self._pm.register(plugin, name=resolved_name)
          logger.debug("Registered event subscriber: %s", resolved_name)

     def unregister(self, plugin: object) -> None:
          self._pm.unregister(plugin)

     def subscriber_names(self) -> list[str]:
          return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

     def dispatch(self, hook_name: str, payload: dict[str, Any]) -> None:
          """Deliver an event to every subscriber of ``hook_name``."""
          if self._executor is None:
               self._deliver(hook_name, payload)
               return

          future = self._executor.submit(self._deliver, hook_name, payload)
          with self._futures_lock:
               self._futures = [f for f in self._futures if not f.done()]
               self._futures.append(future)

     def wait(self) -> None:
          """Block until every in-flight delivery has finished."""
          with self._futures_lock:
               pending = list(self._futures)
               self._futures.clear()
          for future in pending:
               future.result()

     def shutdown(self) -> None:
          """Finish pending deliveries and stop the worker pool."""
          self.wait()
          if self._executor is not None:
               self._executor.shutdown(wait=True)
               self._executor = None
               self._sync = True

     def _deliver(self, hook_name: str, payload: dict[str, Any]) -> None:
          hook_caller = getattr(self._pm.hook, hook_name, None)
          if hook_caller is None:
               logger.debug("No hook named %s; event dropped", hook_name)
               return

          # Call implementations one by one so a failing subscriber
          # does not stop the others from hearing about the event.
          for impl in reversed(hook_caller.get_hookimpls()):
               try:
                    impl.function(**{name: payload[name] for name in impl.argnames})
               except Exception as exc:
                    logger.warning(
                         "Subscriber %s failed handling %s: %s",
                         impl.plugin_name, hook_name, exc,
                    )
