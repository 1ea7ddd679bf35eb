# =============================================================================
# salon_core/offline/live_query.py
# Reactive Queries over the Local Database
# =============================================================================
"""
LiveQuery - a restartable stream of query results.

A LiveQuery wraps a loader (a function that reads the local database) and the
table it depends on. Subscribers receive the current result immediately and
then a new result after every committed write to that table, and after every
sign-in or sign-out of the tenant context it was given, but only when the
result actually changed.

Usage:
    query = repo.observe_all()
    subscription = query.subscribe(lambda customers: print(len(customers)))
    ...
    subscription.cancel()
"""

from __future__ import annotations
import threading
from typing import Any, Callable, Generic, List, Optional, TypeVar
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET = object()


class Subscription:
    """Handle returned by LiveQuery.subscribe()."""

    def __init__(self, query: "LiveQuery", callback: Callable[[Any], None]):
        self._query = query
        self.callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Stop receiving results. Safe to call more than once."""
        if self._active:
            self._active = False
            self._query._remove(self)


class LiveQuery(Generic[T]):
    """
    Re-evaluates `loader` after writes to `table` and pushes changed results.

    Every subscribe() starts the stream again from the current state, so a
    LiveQuery object can be kept and re-subscribed after all subscriptions
    were cancelled.
    """

    def __init__(
        self,
        local_db,
        table: str,
        loader: Callable[[], T],
        name: Optional[str] = None,
        tenant_context=None,
    ):
        self._local_db = local_db
        self.table = table
        self._loader = loader
        self._tenant_context = tenant_context
        self.name = name or table
        self._lock = threading.RLock()
        self._subscriptions: List[Subscription] = []
        self._last: Any = _UNSET

    def get(self) -> T:
        """Evaluate the query once, without subscribing."""
        return self._loader()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        """
        Subscribe to query results.

        Args:
            callback: Called with the current result now and with every
                changed result afterwards

        Returns:
            Subscription that can be cancelled
        """
        subscription = Subscription(self, callback)
        with self._lock:
            if not self._subscriptions:
                self._local_db.register_listener(self.table, self._on_table_changed)
                if self._tenant_context is not None:
                    self._tenant_context.register_listener(self._on_tenant_changed)
                self._last = _UNSET
            self._subscriptions.append(subscription)
            if self._last is _UNSET:
                self._last = self._loader()
            current = self._last

        self._emit(subscription, current)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
            if not self._subscriptions:
                self._local_db.unregister_listener(self.table, self._on_table_changed)
                if self._tenant_context is not None:
                    self._tenant_context.unregister_listener(self._on_tenant_changed)
                self._last = _UNSET

    def _on_table_changed(self, table: str) -> None:
        self._refresh()

    def _on_tenant_changed(self, tenant_id: Optional[str]) -> None:
        self._refresh()

    def _refresh(self) -> None:
        with self._lock:
            if not self._subscriptions:
                return
            result = self._loader()
            if result == self._last:
                return
            self._last = result
            subscriptions = list(self._subscriptions)

        for subscription in subscriptions:
            self._emit(subscription, result)

    def _emit(self, subscription: Subscription, result: T) -> None:
        if not subscription.active:
            return
        try:
            subscription.callback(result)
        except Exception as e:
            logger.error(f"Error in live query subscriber ({self.name}): {e}")
