"""A first-fit free-list allocator over a growable heap."""

from __future__ import annotations

from dataclasses import dataclass

HEADER_SIZE = 8
MIN_UNITS = 4096
_BASE = -1


@dataclass
class _Header:
    ptr: int
    size: int


class Heap:
    """A heap of at most ``limit`` bytes, grown with ``sbrk``.

    Blocks are measured in header-sized units; every block starts with a
    header, and ``malloc`` returns the byte address just after it.
    """

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self._brk = 0
        self._headers: dict[int, _Header] = {}
        self._allocated: set[int] = set()
        self._freep: int | None = None

    def sbrk(self, n: int) -> int:
        """Move the break by ``n`` bytes and return the old break."""
        old = self._brk
        new = old + n
        if new < 0 or new > self.limit:
            raise MemoryError(f"sbrk({n}) outside heap of {self.limit} bytes")
        self._brk = new
        return old

    def malloc(self, nbytes: int) -> int:
        """Allocate ``nbytes`` and return the block's address."""
        if nbytes < 0:
            raise ValueError("malloc: negative size")
        nunits = (nbytes + HEADER_SIZE - 1) // HEADER_SIZE + 1
        headers = self._headers
        if self._freep is None:
            headers[_BASE] = _Header(_BASE, 0)
            self._freep = _BASE
        prevp = self._freep
        p = headers[prevp].ptr
        while True:
            block = headers[p]
            if block.size >= nunits:
                if block.size == nunits:
                    headers[prevp].ptr = block.ptr
                else:
                    block.size -= nunits
                    p += block.size
                    headers[p] = _Header(p, nunits)
                self._freep = prevp
                self._allocated.add(p)
                return (p + 1) * HEADER_SIZE
            if p == self._freep:
                grown = self._morecore(nunits)
                if grown is None:
                    raise MemoryError(f"malloc({nbytes}): out of memory")
                p = grown
            prevp, p = p, headers[p].ptr

    def free(self, addr: int) -> None:
        """Return a block obtained from ``malloc`` to the free list."""
        unit, rem = divmod(addr, HEADER_SIZE)
        bp = unit - 1
        if rem or bp not in self._allocated:
            raise ValueError(f"free: {addr:#x} is not an allocated block")
        self._allocated.remove(bp)
        self._release(bp)

    def free_blocks(self) -> list[tuple[int, int]]:
        """Free blocks as (header address, size) pairs in bytes, in address order."""
        if self._freep is None:
            return []
        headers = self._headers
        blocks = []
        p = headers[_BASE].ptr
        while p != _BASE:
            blocks.append((p * HEADER_SIZE, headers[p].size * HEADER_SIZE))
            p = headers[p].ptr
        return blocks

    def _morecore(self, nunits: int) -> int | None:
        nunits = max(nunits, MIN_UNITS)
        pad = -self._brk % HEADER_SIZE
        try:
            start = self.sbrk(pad + nunits * HEADER_SIZE)
        except MemoryError:
            return None
        hp = (start + pad) // HEADER_SIZE
        self._headers[hp] = _Header(hp, nunits)
        self._release(hp)
        return self._freep

    def _release(self, bp: int) -> None:
        headers = self._headers
        block = headers[bp]
        p = self._freep
        while not (p < bp < headers[p].ptr):
            nxt = headers[p].ptr
            if p >= nxt and (bp > p or bp < nxt):
                break
            p = nxt
        cur = headers[p]
        if bp + block.size == cur.ptr:
            upper = headers.pop(cur.ptr)
            block.size += upper.size
            block.ptr = upper.ptr
        else:
            block.ptr = cur.ptr
        if p + cur.size == bp:
            cur.size += block.size
            cur.ptr = block.ptr
            del headers[bp]
        else:
            cur.ptr = bp
        self._freep = p