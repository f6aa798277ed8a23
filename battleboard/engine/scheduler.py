"""
Single-threaded task queue for delayed state transitions.

Time is virtual: the owner advances the clock (advance) or drains the queue
(run_all). Tasks run one at a time, in due order, on the caller's thread.
cancel_all() bumps the queue generation so a task scheduled before the cancel
can never run afterwards, even if it is already being iterated.
"""

import heapq
from dataclasses import dataclass, field
from typing import Callable


@dataclass(order=True)
class ScheduledTask:
    due_at: float
    task_id: int
    name: str = field(compare=False)
    callback: Callable[[], None] = field(compare=False, repr=False)
    generation: int = field(compare=False, default=0)
    cancelled: bool = field(compare=False, default=False)


class TaskQueue:
    def __init__(self) -> None:
        self._now = 0.0
        self._heap: list[ScheduledTask] = []
        self._next_id = 1
        self._generation = 0

    @property
    def now(self) -> float:
        return self._now

    @property
    def generation(self) -> int:
        return self._generation

    def schedule(self, delay: float, name: str, callback: Callable[[], None]) -> ScheduledTask:
        """Run callback once, delay seconds from now."""
        if delay < 0:
            raise ValueError(f"Delay must not be negative, got {delay}")
        task = ScheduledTask(
            due_at=self._now + delay,
            task_id=self._next_id,
            name=name,
            callback=callback,
            generation=self._generation,
        )
        self._next_id += 1
        heapq.heappush(self._heap, task)
        return task

    def cancel(self, task: ScheduledTask | None) -> None:
        if task is not None:
            task.cancelled = True

    def cancel_all(self) -> int:
        """Drop every pending task. Returns how many were dropped."""
        dropped = len(self.pending())
        for task in self._heap:
            task.cancelled = True
        self._heap = []
        self._generation += 1
        return dropped

    def pending(self, name: str | None = None) -> list[ScheduledTask]:
        tasks = [t for t in sorted(self._heap) if self._is_live(t)]
        if name is not None:
            tasks = [t for t in tasks if t.name == name]
        return tasks

    def has_pending(self, name: str | None = None) -> bool:
        return bool(self.pending(name))

    def _is_live(self, task: ScheduledTask) -> bool:
        return not task.cancelled and task.generation == self._generation

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward and run every task that falls due, including
        tasks scheduled by callbacks during this call. Returns tasks run.
        """
        if seconds < 0:
            raise ValueError(f"Cannot move the clock backwards ({seconds})")
        target = self._now + seconds
        ran = 0
        while self._heap and self._heap[0].due_at <= target:
            task = heapq.heappop(self._heap)
            if not self._is_live(task):
                continue
            self._now = max(self._now, task.due_at)
            task.callback()
            ran += 1
        self._now = max(self._now, target)
        return ran

    def run_all(self) -> int:
        """Run tasks until the queue is empty, jumping the clock to each due time."""
        ran = 0
        while self._heap:
            task = self._heap[0]
            ran += self.advance(max(0.0, task.due_at - self._now))
        return ran
