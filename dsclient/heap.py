#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""heap - A Priority Queue based on the `heapq` module."""

import heapq
import itertools
from typing import Generic, TypeVar, List, Generator, Optional, Iterator
from typing import Tuple, Any

T = TypeVar('T')
ENTRY_T = Tuple[Any, int, T]


class Heap(Generic[T]):
    """A Priority Queue that is backed by a heap data structure.

    Items with equal priority come out in insertion order, since every entry
    carries a monotonically increasing counter right after its priority.
    """

    priority_queue: List[ENTRY_T]
    'The actual priority queue, implemented as a list with heap ordering.'

    def __init__(self, items=(), key=None):
        """Initializes the heap.

        Parameters
        ----------
            items : Iterable[T]
                Items to start with
            key : Optional[Callable[[T], Any]]
                Function computing the priority of an item when :func:`add`
                is called without one
        """
        self.priority_queue = []
        self.counter = itertools.count()
        self.key = key
        for item in items:
            self.add(item)

    def add(self, item: T, priority=None) -> None:
        """Add a new item, lowest priority comes out first"""
        if priority is None:
            if self.key is None:
                raise ValueError('No priority given and no key function set')
            priority = self.key(item)
        heapq.heappush(
            self.priority_queue, (priority, next(self.counter), item)
        )

    def pop(self) -> T:
        """Remove and return the lowest priority item.

        Raises KeyError if empty."""
        if not self.priority_queue:
            raise KeyError('pop from an empty priority queue')
        return heapq.heappop(self.priority_queue)[-1]

    def __iter__(self) -> Iterator[T]:
        return iter(self.heapsort())

    def __contains__(self, item):
        return any(e[-1] is item for e in self.priority_queue)

    def __len__(self):
        return len(self.priority_queue)

    def __bool__(self):
        return bool(self.priority_queue)

    @property
    def first(self) -> Optional[T]:
        """Returns the "first" item (highest priority item) in the Heap."""
        if not self.priority_queue:
            return None
        return self.priority_queue[0][-1]

    def heapsort(self) -> Generator[T, None, None]:
        """Generator that iterates over all elements in the heap in priority
        order."""
        h = list(self.priority_queue)
        while h:
            yield heapq.heappop(h)[-1]
