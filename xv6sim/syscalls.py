"""System call dispatch, user-memory argument fetching and trap handling."""

from __future__ import annotations

import enum
import errno
from typing import Any, Callable, Optional

from .proc import NPROC, KernelPanic, Proc, ProcessTable, ProcState

IRQ_TIMER = 0
IRQ_KBD = 1
IRQ_COM1 = 4
IRQ_IDE = 14
IRQ_ERROR = 19
IRQ_SPURIOUS = 31


class Syscall(enum.IntEnum):
    """System call numbers."""

    FORK = 1
    EXIT = 2
    WAIT = 3
    PIPE = 4
    READ = 5
    KILL = 6
    EXEC = 7
    FSTAT = 8
    CHDIR = 9
    DUP = 10
    GETPID = 11
    SBRK = 12
    SLEEP = 13
    UPTIME = 14
    OPEN = 15
    WRITE = 16
    MKNOD = 17
    UNLINK = 18
    LINK = 19
    MKDIR = 20
    CLOSE = 21
    GETPROCINFO = 22
    NICE = 23


class Trap(enum.IntEnum):
    """Trap and interrupt vector numbers."""

    DIVIDE = 0
    DEBUG = 1
    NMI = 2
    BRKPT = 3
    OFLOW = 4
    BOUND = 5
    ILLOP = 6
    DEVICE = 7
    DBLFLT = 8
    TSS = 10
    SEGNP = 11
    STACK = 12
    GPFLT = 13
    PGFLT = 14
    FPERR = 16
    ALIGN = 17
    MCHK = 18
    SIMDERR = 19
    IRQ0 = 32
    SYSCALL = 64
    DEFAULT = 500


_DEVICE_IRQS = frozenset(
    Trap.IRQ0 + irq for irq in (IRQ_IDE, IRQ_IDE + 1, IRQ_KBD, IRQ_COM1)
)
_SPURIOUS_IRQS = frozenset((Trap.IRQ0 + 7, Trap.IRQ0 + IRQ_SPURIOUS))
_TIMER = Trap.IRQ0 + IRQ_TIMER


def _fault(message: str) -> OSError:
    return OSError(errno.EFAULT, message)


class UserMemory:
    """The address space of a user process, from address 0 to its size."""

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)

    @property
    def sz(self) -> int:
        return len(self.data)

    def fetch_int(self, addr: int) -> int:
        """The signed 32-bit little-endian integer at ``addr``."""
        if addr < 0 or addr >= self.sz or addr + 4 > self.sz:
            raise _fault(f"int at {addr:#x} outside process memory")
        return int.from_bytes(self.data[addr:addr + 4], "little", signed=True)

    def fetch_str(self, addr: int) -> str:
        """The NUL-terminated string at ``addr``, without its NUL."""
        if addr < 0 or addr >= self.sz:
            raise _fault(f"string at {addr:#x} outside process memory")
        end = self.data.find(b"\0", addr)
        if end < 0:
            raise _fault(f"string at {addr:#x} is not terminated")
        return self.data[addr:end].decode("latin-1")


class Kernel:
    """A process table, a tick counter and the entry points into the kernel."""

    def __init__(self, nproc: int = NPROC) -> None:
        self.table = ProcessTable(nproc)
        self.ticks = 0
        self.console: list[str] = []
        self._handlers: dict[Syscall, Callable[..., Any]] = {
            Syscall.FORK: self._sys_fork,
            Syscall.EXIT: self._sys_exit,
            Syscall.WAIT: self._sys_wait,
            Syscall.KILL: self._sys_kill,
            Syscall.GETPID: self._sys_getpid,
            Syscall.GETPROCINFO: self._sys_getprocinfo,
            Syscall.SBRK: self._sys_sbrk,
            Syscall.SLEEP: self._sys_sleep,
            Syscall.UPTIME: self._sys_uptime,
            Syscall.NICE: self._sys_nice,
        }

    def syscall(self, proc: Proc, number: int, *args: Any) -> Any:
        """Run system call ``number`` for ``proc`` and return its result.

        Returns None when the call blocked the process, or when the
        process had been killed and was made to exit instead.
        """
        if self._exit_if_killed(proc):
            return None
        try:
            handler = self._handlers[Syscall(number)]
        except (ValueError, KeyError):
            self.console.append(f"{proc.pid} {proc.name}: unknown sys call {number}")
            raise OSError(errno.ENOSYS, f"unknown system call {number}") from None
        result = handler(proc, *args)
        if self._exit_if_killed(proc):
            return None
        return result

    def timer_tick(self) -> int:
        """Handle one clock tick; return the new tick count."""
        self.table.tick()
        self.ticks += 1
        self.table.wakeup(("ticks", self.ticks))
        return self.ticks

    def trap(self, proc: Optional[Proc], trapno: int) -> None:
        """Handle an interrupt or fault that arrived while ``proc`` ran in user mode."""
        if trapno == Trap.SYSCALL:
            raise ValueError("system calls enter through Kernel.syscall")
        if trapno == _TIMER:
            self.timer_tick()
        elif trapno in _DEVICE_IRQS:
            pass  # device interrupts are acknowledged; the devices are not modelled
        elif trapno in _SPURIOUS_IRQS:
            self.console.append(f"cpu0: spurious interrupt (vector {trapno})")
        elif proc is None:
            self.console.append(f"unexpected trap {trapno} from cpu 0")
            raise KernelPanic("trap")
        else:
            self.console.append(
                f"pid {proc.pid} {proc.name}: trap {trapno} on cpu 0--kill proc"
            )
            proc.killed = True

        if proc is None or self._exit_if_killed(proc):
            return
        if proc.state == ProcState.RUNNING and trapno == _TIMER:
            self.table.yield_cpu(proc)

    def uptime(self) -> int:
        """Clock ticks since start."""
        return self.ticks

    def _exit_if_killed(self, proc: Proc) -> bool:
        if proc.killed and proc.state not in (ProcState.ZOMBIE, ProcState.UNUSED):
            self.table.exit(proc)
            return True
        return False

    def _sys_fork(self, proc: Proc) -> int:
        return self.table.fork(proc).pid

    def _sys_exit(self, proc: Proc) -> None:
        self.table.exit(proc)
        return None

    def _sys_wait(self, proc: Proc) -> Optional[int]:
        return self.table.wait(proc)

    def _sys_kill(self, proc: Proc, pid: int) -> int:
        self.table.kill(pid)
        return 0

    def _sys_getpid(self, proc: Proc) -> int:
        return proc.pid

    def _sys_getprocinfo(self, proc: Proc, pid: int):
        return self.table.getprocinfo(proc, pid)

    def _sys_sbrk(self, proc: Proc, n: int) -> int:
        addr = proc.sz
        self.table.grow(proc, n)
        return addr

    def _sys_sleep(self, proc: Proc, n: int) -> Optional[int]:
        if n <= 0:
            return 0
        self.table.sleep(proc, ("ticks", self.ticks + n))
        return None

    def _sys_uptime(self, proc: Proc) -> int:
        return self.ticks

    def _sys_nice(self, proc: Proc, pid: int, priority: int) -> int:
        self.table.nice(pid, priority)
        return 0