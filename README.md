# xv6sim

A pure-Python model of a small Unix-like teaching kernel. It keeps the kernel's
bookkeeping and rules (how the process table allocates, forks, reaps and schedules
processes, how locks check their holders, how system calls are dispatched) and
leaves the hardware out.

## What is inside

- `xv6sim.proc`: `ProcessTable`, a fixed-size table of `Proc` slots with
  `alloc`, `userinit`, `fork`, `exit`, `wait`, `sleep`, `wakeup`, `kill`,
  `nice`, `grow`, `schedule`, `yield_cpu`, `tick` and `procdump`. The scheduler
  (`choose_next` / `schedule`) picks the runnable process with the lowest `nice`
  value, the earliest slot winning ties. `nice(pid, priority)` accepts -20..19;
  it stores the absolute value and marks the process privileged when the
  priority is negative. `getprocinfo(caller, pid)` returns a `ProcInfo` only for
  the caller itself or one of its descendants and raises `PermissionError`
  otherwise. Breaking a kernel invariant raises `KernelPanic`.
- `xv6sim.locks`: `SpinLock` and `SleepLock`. A `SpinLock` is taken on behalf of
  a `Cpu`, whose `push_cli` / `pop_cli` nest interrupt disabling; misuse such as
  acquiring a lock twice on the same CPU or releasing one that is not held
  raises `LockError`.
- `xv6sim.syscalls`: `Kernel`, which owns a `ProcessTable` and a tick counter.
  `Kernel.syscall(proc, number, *args)` dispatches the process-related
  `Syscall`s (fork, exit, wait, kill, getpid, getprocinfo, sbrk, sleep, uptime,
  nice). `Kernel.trap` and `Kernel.timer_tick` handle clock ticks, which charge
  CPU time, wake sleepers and make the running process yield. `UserMemory`
  fetches integer and string arguments from a process's address space and
  raises `OSError` (EFAULT) for addresses outside it.
- `xv6sim.shell`: `tokenize` and `parse_command`, which turn a command line into
  a tree of `ExecCmd`, `RedirCmd`, `PipeCmd`, `ListCmd` and `BackCmd`, and raise
  `ShellSyntaxError` on bad input.
- `xv6sim.umalloc`: `Heap`, a first-fit free-list allocator grown with `sbrk`,
  which coalesces neighbouring free blocks.
- `xv6sim.strings`: C string and memory helpers (`memset`, `memmove`,
  `strncmp`, `safestrcpy`, `strchr`, `atoi`, ...).
- `xv6sim.wc` and `xv6sim.ps`: the user utilities.

## Installing

```
pip install .
pip install ".[test]"   # with pytest
```

## Using it

```python
from xv6sim.proc import ProcessTable

table = ProcessTable(64)
init = table.userinit()
child = table.fork(init)
table.nice(child.pid, -5)          # nice value 5, privileged
info = table.getprocinfo(init, child.pid)
print(info.nice, info.is_privileged, info.state)   # 5 True RUNNABLE
```

```python
from xv6sim.syscalls import Kernel, Syscall

kernel = Kernel()
init = kernel.table.userinit()
kernel.table.schedule()
pid = kernel.syscall(init, Syscall.FORK)
print(kernel.syscall(init, Syscall.GETPID), pid)   # 1 2
```

```python
from xv6sim.shell import parse_command

tree = parse_command("cat < in | grep x > out; echo done &\n")
```

## Commands

Count lines, words and bytes in files, or in standard input when no file is given:

```
xv6-wc README.md
```

Show information about a process in a freshly started simulated system, where the
caller is the first process. With no argument it reports on the caller:

```
xv6-ps
xv6-ps 1
```

## What it does not do

- There is no file system, no files or pipes and no program loading: the
  system calls for them (open, read, write, pipe, exec, link, mkdir and the
  rest) have numbers in `Syscall` but `Kernel.syscall` rejects them with
  `OSError` (ENOSYS), as it does any unknown number.
- Memory is modelled only as a size: `grow` changes `Proc.sz`, and there are no
  page tables.
- The shell parses command lines but does not run them.
- There is one simulated CPU; devices and their interrupts are not modelled.

## Running the tests

```
pytest
```