"""The process table: allocation, fork/exit/wait, scheduling by niceness."""

from __future__ import annotations

import enum
import errno
from dataclasses import dataclass
from typing import Any, Optional

from .strings import safestrcpy

NPROC = 64
KSTACKSIZE = 4096
NCPU = 8
NOFILE = 16
NFILE = 100
NINODE = 50
NDEV = 10
ROOTDEV = 1
MAXARG = 32
MAXOPBLOCKS = 10
LOGSIZE = MAXOPBLOCKS * 3
NBUF = MAXOPBLOCKS * 3
FSSIZE = 20000

PGSIZE = 4096
# User memory ends where the kernel's address space begins.
USER_LIMIT = 0x80000000
PSTATE_LEN = 16
NAME_LEN = 16
NICE_MIN = -20
NICE_MAX = 19


class KernelPanic(RuntimeError):
    """An invariant of the kernel was broken."""


class ProcState(enum.IntEnum):
    UNUSED = 0
    EMBRYO = 1
    SLEEPING = 2
    RUNNABLE = 3
    RUNNING = 4
    ZOMBIE = 5


_DUMP_NAMES = {
    ProcState.UNUSED: "unused",
    ProcState.EMBRYO: "embryo",
    ProcState.SLEEPING: "sleep ",
    ProcState.RUNNABLE: "runble",
    ProcState.RUNNING: "run   ",
    ProcState.ZOMBIE: "zombie",
}


def state_name(state) -> str:
    """Upper-case name of a process state, or ``"UNKNOWN"``."""
    try:
        return ProcState(state).name
    except ValueError:
        return "UNKNOWN"


@dataclass(eq=False)
class Proc:
    """One slot of the process table."""

    slot: int
    state: ProcState = ProcState.UNUSED
    pid: int = 0
    parent: Optional["Proc"] = None
    sz: int = 0
    chan: Any = None
    killed: bool = False
    cputicks: int = 0
    name: str = ""
    nice: int = 0
    is_privileged: bool = False
    cwd: Optional[str] = None


@dataclass(frozen=True)
class ProcInfo:
    """What ``getprocinfo`` reports about a process."""

    pid: int
    ppid: int
    state: str
    sz: int
    cputicks: int
    name: str
    nice: int
    is_privileged: bool


def can_access_procinfo(caller: Optional[Proc], target: Optional[Proc]) -> bool:
    """Whether ``caller`` is ``target`` or one of its ancestors."""
    while target is not None:
        if target is caller:
            return True
        target = target.parent
    return False


class ProcessTable:
    """A fixed-size table of processes and the one CPU that runs them."""

    def __init__(self, nproc: int = NPROC) -> None:
        self.procs = [Proc(slot=i) for i in range(nproc)]
        self.nextpid = 1
        self.initproc: Optional[Proc] = None
        self.current: Optional[Proc] = None

    def find(self, pid: int) -> Optional[Proc]:
        """The live process with this pid, or None."""
        return next(
            (p for p in self.procs if p.pid == pid and p.state != ProcState.UNUSED),
            None,
        )

    def alloc(self) -> Proc:
        """Take an unused slot and make it an embryo with a fresh pid."""
        p = next((p for p in self.procs if p.state == ProcState.UNUSED), None)
        if p is None:
            raise OSError(errno.EAGAIN, "process table full")
        p.state = ProcState.EMBRYO
        p.pid = self.nextpid
        self.nextpid += 1
        p.cputicks = 0
        p.nice = 0
        p.is_privileged = False
        return p

    def userinit(self) -> Proc:
        """Create the first user process."""
        p = self.alloc()
        self.initproc = p
        p.sz = PGSIZE
        p.is_privileged = False
        p.name = safestrcpy("initcode", NAME_LEN)
        p.cwd = "/"
        p.state = ProcState.RUNNABLE
        return p

    def grow(self, proc: Proc, n: int) -> int:
        """Grow (or shrink) the memory of ``proc`` by ``n`` bytes; return the new size."""
        sz = proc.sz
        if n > 0:
            if sz + n >= USER_LIMIT:
                raise MemoryError(f"cannot grow process {proc.pid} by {n} bytes")
            sz += n
        elif n < 0 and sz + n >= 0:
            sz += n
        proc.sz = sz
        return sz

    def fork(self, parent: Proc) -> Proc:
        """Create a runnable copy of ``parent`` and return it."""
        child = self.alloc()
        child.sz = parent.sz
        child.parent = parent
        child.nice = parent.nice
        child.is_privileged = parent.is_privileged
        child.cwd = parent.cwd
        child.name = safestrcpy(parent.name, NAME_LEN)
        child.state = ProcState.RUNNABLE
        return child

    def exit(self, proc: Proc) -> None:
        """Turn ``proc`` into a zombie and hand its children to init."""
        if proc is self.initproc:
            raise KernelPanic("init exiting")
        proc.cwd = None
        if proc.parent is not None:
            self._wakeup(proc.parent)
        for p in self.procs:
            if p.parent is proc:
                p.parent = self.initproc
                if p.state == ProcState.ZOMBIE and self.initproc is not None:
                    self._wakeup(self.initproc)
        proc.state = ProcState.ZOMBIE
        self._leave(proc)

    def wait(self, proc: Proc) -> Optional[int]:
        """Reap an exited child and return its pid.

        Returns None after putting ``proc`` to sleep when its children are
        all still alive; call again once it is woken.
        """
        havekids = False
        for p in self.procs:
            if p.parent is not proc:
                continue
            havekids = True
            if p.state == ProcState.ZOMBIE:
                pid = p.pid
                p.pid = 0
                p.parent = None
                p.name = ""
                p.killed = False
                p.chan = None
                p.state = ProcState.UNUSED
                return pid
        if not havekids:
            raise ChildProcessError(f"process {proc.pid} has no children")
        if proc.killed:
            raise ChildProcessError(f"process {proc.pid} was killed")
        self.sleep(proc, proc)
        return None

    def choose_next(self) -> Optional[Proc]:
        """The runnable process with the lowest nice value; earliest slot on ties."""
        best: Optional[Proc] = None
        for p in self.procs:
            if p.state != ProcState.RUNNABLE:
                continue
            if best is None or p.nice < best.nice:
                best = p
        return best

    def schedule(self) -> Optional[Proc]:
        """Run the next process on the CPU and return it, or None if none is runnable."""
        if self.current is not None and self.current.state == ProcState.RUNNING:
            raise KernelPanic("sched running")
        p = self.choose_next()
        if p is not None:
            p.state = ProcState.RUNNING
            self.current = p
        return p

    def yield_cpu(self, proc: Proc) -> None:
        """Give up the CPU for one scheduling round."""
        proc.state = ProcState.RUNNABLE
        self._leave(proc)

    def sleep(self, proc: Optional[Proc], chan: Any) -> None:
        """Put ``proc`` to sleep on ``chan``."""
        if proc is None:
            raise KernelPanic("sleep")
        proc.chan = chan
        proc.state = ProcState.SLEEPING
        self._leave(proc)

    def wakeup(self, chan: Any) -> int:
        """Make every process sleeping on ``chan`` runnable; return how many woke."""
        return self._wakeup(chan)

    def kill(self, pid: int) -> None:
        """Mark a process killed, waking it if it sleeps."""
        p = self.find(pid)
        if p is None:
            raise ProcessLookupError(f"no process {pid}")
        p.killed = True
        if p.state == ProcState.SLEEPING:
            p.state = ProcState.RUNNABLE

    def nice(self, pid: int, priority: int) -> None:
        """Set the nice value of a process; a negative priority makes it privileged."""
        if not NICE_MIN <= priority <= NICE_MAX:
            raise ValueError(f"priority {priority} outside {NICE_MIN}..{NICE_MAX}")
        p = self.find(pid)
        if p is None:
            raise ProcessLookupError(f"no process {pid}")
        p.nice = abs(priority)
        p.is_privileged = priority < 0

    def getprocinfo(self, caller: Optional[Proc], pid: int) -> ProcInfo:
        """Report on ``pid``, which must be ``caller`` or one of its descendants."""
        p = self.find(pid)
        if p is None:
            raise ProcessLookupError(f"no process {pid}")
        if not can_access_procinfo(caller, p):
            raise PermissionError(f"process {pid} is not in the caller's family")
        return ProcInfo(
            pid=p.pid,
            ppid=p.parent.pid if p.parent is not None else 0,
            state=safestrcpy(state_name(p.state), PSTATE_LEN),
            sz=p.sz,
            cputicks=p.cputicks,
            name=safestrcpy(p.name, NAME_LEN),
            nice=p.nice,
            is_privileged=p.is_privileged,
        )

    def tick(self) -> Optional[Proc]:
        """Charge one timer tick to the running process and return it."""
        p = self.current
        if p is not None and p.state == ProcState.RUNNING:
            p.cputicks += 1
            return p
        return None

    def procdump(self) -> list[str]:
        """One line per live process: pid, short state and name."""
        return [
            f"{p.pid} {_DUMP_NAMES.get(p.state, '???')} {p.name}"
            for p in self.procs
            if p.state != ProcState.UNUSED
        ]

    def _wakeup(self, chan: Any) -> int:
        woken = 0
        for p in self.procs:
            if p.state == ProcState.SLEEPING and p.chan == chan:
                p.state = ProcState.RUNNABLE
                p.chan = None
                woken += 1
        return woken

    def _leave(self, proc: Proc) -> None:
        if self.current is proc:
            self.current = None