"""
Context Registry

Owns the set of active hardware contexts. Records live in a compact slot
list with an identifier -> slot index for constant-time lookup.
"""

import logging
from typing import Dict, Iterator, List, Optional

from .context import ContextMetrics

logger = logging.getLogger(__name__)


class ContextRegistry:
    """
    Slot list of active contexts plus identifier index.

    Removal moves the last record into the vacated slot, so slot order is
    not registration order. Records carry ``registration_order`` for
    callers that need registration ordering.
    """

    def __init__(self, max_contexts: int):
        """
        Initialize registry.

        Args:
            max_contexts: Maximum number of simultaneously active contexts
        """
        self.max_contexts = max_contexts

        self._slots: List[ContextMetrics] = []
        self._index: Dict[int, int] = {}

        # Next registration sequence number
        self._next_order = 0

    def add(self, context_id: int,
            initial_allocation: int) -> Optional[ContextMetrics]:
        """
        Register a new context.

        Args:
            context_id: Identifier, must not already be active
            initial_allocation: Register share to seed the record with

        Returns:
            The new record, or None if the id is taken or the registry is full
        """
        if context_id in self._index:
            logger.debug("Context %d already registered", context_id)
            return None

        if self.is_full:
            logger.debug("Registry full (%d contexts), rejecting context %d",
                         self.max_contexts, context_id)
            return None

        record = ContextMetrics(
            context_id=context_id,
            allocated_registers=initial_allocation,
            registration_order=self._next_order
        )
        self._next_order += 1

        self._index[context_id] = len(self._slots)
        self._slots.append(record)

        return record

    def remove(self, context_id: int) -> bool:
        """
        Deregister a context.

        Args:
            context_id: Identifier to remove

        Returns:
            True if the context was removed, False if it was not active
        """
        slot = self._index.get(context_id)
        if slot is None:
            return False

        last = len(self._slots) - 1
        if slot < last:
            # Compact: move the last record into the hole
            moved = self._slots[last]
            self._slots[slot] = moved
            self._index[moved.context_id] = slot

        self._slots.pop()
        del self._index[context_id]

        return True

    def get(self, context_id: int) -> Optional[ContextMetrics]:
        """Get the live record for a context, or None."""
        slot = self._index.get(context_id)
        if slot is None:
            return None
        return self._slots[slot]

    def slot_of(self, context_id: int) -> Optional[int]:
        """Current slot position of a context."""
        return self._index.get(context_id)

    def records(self) -> List[ContextMetrics]:
        """Live records in slot order."""
        return list(self._slots)

    @property
    def is_full(self) -> bool:
        return len(self._slots) >= self.max_contexts

    def __contains__(self, context_id: int) -> bool:
        return context_id in self._index

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[ContextMetrics]:
        return iter(self._slots)
