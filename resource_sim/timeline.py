"""Append-only event logs used for engine traces and the session timeline.

A log created with ``capacity=None`` keeps every record. A log with an
integer capacity behaves as a ring: once full, appending drops the oldest
record. Sequence numbers keep growing across evictions.
"""

from collections import deque
import copy


class EventLog:
    def __init__(self, capacity=None):
        if capacity is not None:
            capacity = max(1, int(capacity))
        self.capacity = capacity
        self._records = deque(maxlen=capacity)
        self._next_step = 1

    def __len__(self):
        return len(self._records)

    def append(self, **fields):
        record = {'step': self._next_step}
        record.update(copy.deepcopy(fields))
        self._next_step += 1
        self._records.append(record)
        return copy.deepcopy(record)

    def records(self):
        return [copy.deepcopy(record) for record in self._records]

    def latest(self, limit=None):
        if limit is None or limit >= len(self._records):
            return self.records()
        if limit <= 0:
            return []
        return [copy.deepcopy(record) for record in list(self._records)[-limit:]]

    def last(self):
        if not self._records:
            return None
        return copy.deepcopy(self._records[-1])

    def clear(self):
        self._records.clear()
        self._next_step = 1
