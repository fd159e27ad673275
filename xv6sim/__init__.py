"""Model of a small teaching kernel: process table, locks, system call dispatch, shell parser and user tools."""

__version__ = "0.1.0"

__all__ = ["strings", "umalloc", "wc", "shell", "locks", "proc", "syscalls", "ps"]