"""Report on a process, and a demonstration of the nice system call."""

from __future__ import annotations

import sys

from .proc import ProcInfo, ProcessTable
from .strings import atoi


def format_procinfo(info: ProcInfo) -> str:
    """The report that ``ps`` prints for one process."""
    return (
        f" pid={info.pid}\n"
        f" Parent pid={info.ppid}\n"
        f" Current Process State={info.state}\n"
        f" Memory size allocated={info.sz}\n"
        f" CPU ticks={info.cputicks}\n"
        f" Process Name={info.name}\n"
    )


def _lookup(table: ProcessTable, pid: int) -> ProcInfo | None:
    try:
        return table.getprocinfo(table.find(pid), pid)
    except (ProcessLookupError, PermissionError):
        return None


def _try_nice(table: ProcessTable, pid: int, priority: int) -> None:
    try:
        table.nice(pid, priority)
    except (ProcessLookupError, ValueError):
        pass


def nice_demo(table: ProcessTable, pid: int) -> str:
    """Show process ``pid``'s niceness before and after nice 5 and nice -5."""
    out = [f"Current pid: {pid}\n"]
    info = _lookup(table, pid)
    if info is not None:
        out.append(
            f"Before change -> nice: {info.nice}, privileged: {int(info.is_privileged)}\n"
        )
    else:
        out.append("getprocinfo failed\n")

    for priority, label in ((5, "After nice 5"), (-5, "After nice -5 attempt")):
        out.append(f"\nTrying nice({pid}, {priority})\n")
        _try_nice(table, pid, priority)
        info = _lookup(table, pid)
        if info is not None:
            out.append(
                f"{label} -> nice: {info.nice}, privileged: {int(info.is_privileged)}\n"
            )
    return "".join(out)


def _ps(args: list[str], table: ProcessTable, caller) -> int:
    if len(args) > 1:
        print("usage: ps [pid]")
        return 1
    pid = atoi(args[0]) if args else caller.pid
    if pid <= 0:
        print(f"ps: invalid pid {pid}")
        return 1
    try:
        info = table.getprocinfo(caller, pid)
    except (ProcessLookupError, PermissionError):
        print(
            f"ps: cannot access pid {pid} "
            "(not in your process family or does not exist)"
        )
        return 1
    print(format_procinfo(info), end="")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Report on a process of a freshly started table; the caller is its first process."""
    args = sys.argv[1:] if argv is None else list(argv)
    table = ProcessTable()
    caller = table.userinit()
    table.schedule()
    return _ps(args, table, caller)