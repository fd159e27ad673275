"""Spin locks, sleep locks and the per-CPU interrupt-disable nesting they rely on."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any


class LockError(RuntimeError):
    """A lock or interrupt-nesting rule was broken."""


@dataclass(eq=False)
class Cpu:
    """Per-CPU state that the locks touch.

    ``ncli`` counts nested ``push_cli`` calls and ``intena`` remembers
    whether interrupts were enabled before the outermost one.
    """

    apicid: int = 0
    ncli: int = 0
    intena: bool = False
    interrupts_enabled: bool = True
    proc: Any = None

    def push_cli(self) -> None:
        """Disable interrupts; matched by one ``pop_cli``."""
        enabled = self.interrupts_enabled
        self.interrupts_enabled = False
        if self.ncli == 0:
            self.intena = enabled
        self.ncli += 1

    def pop_cli(self) -> None:
        """Undo one ``push_cli``, re-enabling interrupts after the last one."""
        if self.interrupts_enabled:
            raise LockError("popcli - interruptible")
        if self.ncli <= 0:
            raise LockError("popcli")
        self.ncli -= 1
        if self.ncli == 0 and self.intena:
            self.interrupts_enabled = True


class SpinLock:
    """Mutual exclusion between CPUs; the holder runs with interrupts off."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.cpu: Cpu | None = None
        self._lock = threading.Lock()

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    def acquire(self, cpu: Cpu) -> None:
        """Wait until the lock is free, then take it for ``cpu``."""
        cpu.push_cli()
        if self.holding(cpu):
            cpu.pop_cli()
            raise LockError(f"acquire: {self.name or 'lock'} already held by this cpu")
        self._lock.acquire()
        self.cpu = cpu

    def release(self, cpu: Cpu) -> None:
        """Give the lock up; ``cpu`` must be holding it."""
        if not self.holding(cpu):
            raise LockError(f"release: {self.name or 'lock'} not held by this cpu")
        self.cpu = None
        self._lock.release()
        cpu.pop_cli()

    def holding(self, cpu: Cpu) -> bool:
        """Whether ``cpu`` holds this lock."""
        cpu.push_cli()
        try:
            return self.locked and self.cpu is cpu
        finally:
            cpu.pop_cli()


class SleepLock:
    """A long-term lock whose waiters sleep instead of spinning."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.locked = False
        self.pid = 0
        self._cond = threading.Condition()

    def acquire(self, pid: int) -> None:
        """Sleep until the lock is free, then take it for process ``pid``."""
        with self._cond:
            while self.locked:
                self._cond.wait()
            self.locked = True
            self.pid = pid

    def release(self) -> None:
        """Give the lock up and wake every waiter."""
        with self._cond:
            self.locked = False
            self.pid = 0
            self._cond.notify_all()

    def holding(self, pid: int) -> bool:
        """Whether process ``pid`` holds this lock."""
        with self._cond:
            return self.locked and self.pid == pid