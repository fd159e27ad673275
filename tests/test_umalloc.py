import random

import pytest

from xv6sim.umalloc import HEADER_SIZE, Heap


def test_sbrk_moves_break():
    heap = Heap(limit=1000)
    assert heap.sbrk(0) == 0
    assert heap.sbrk(100) == 0
    assert heap.sbrk(0) == 100
    assert heap.sbrk(-40) == 100
    assert heap.sbrk(0) == 60


def test_sbrk_beyond_limit():
    heap = Heap(limit=100)
    with pytest.raises(MemoryError):
        heap.sbrk(101)
    with pytest.raises(MemoryError):
        heap.sbrk(-1)
    assert heap.sbrk(0) == 0


def test_malloc_too_small_heap():
    heap = Heap(limit=100)
    with pytest.raises(MemoryError):
        heap.malloc(1)


def test_blocks_aligned_and_disjoint():
    heap = Heap(limit=1 << 20)
    sizes = [1, 7, 8, 9, 100, 513, 4000]
    blocks = sorted((heap.malloc(n), n) for n in sizes)
    for addr, _ in blocks:
        assert addr % HEADER_SIZE == 0
        assert 0 < addr < heap.sbrk(0)
    for (a, n), (b, _) in zip(blocks, blocks[1:]):
        assert a + n <= b


def test_free_everything_coalesces():
    heap = Heap(limit=1 << 20)
    addrs = [heap.malloc(n) for n in (10, 200, 3000, 5, 77, 1024)]
    random.Random(3).shuffle(addrs)
    for addr in addrs:
        heap.free(addr)
    assert heap.free_blocks() == [(0, heap.sbrk(0))]


def test_free_then_malloc_reuses_address():
    heap = Heap(limit=1 << 20)
    first = heap.malloc(100)
    heap.free(first)
    assert heap.malloc(100) == first


def test_free_list_in_address_order():
    heap = Heap(limit=1 << 20)
    addrs = [heap.malloc(64) for _ in range(6)]
    for addr in addrs[::2]:
        heap.free(addr)
    free = heap.free_blocks()
    assert [a for a, _ in free] == sorted(a for a, _ in free)
    total_free = sum(size for _, size in free)
    assert total_free < heap.sbrk(0)


def test_large_request_grows_heap():
    heap = Heap(limit=1 << 20)
    addr = heap.malloc(100_000)
    assert addr + 100_000 <= heap.sbrk(0)


def test_free_unknown_or_twice():
    heap = Heap(limit=1 << 20)
    addr = heap.malloc(16)
    with pytest.raises(ValueError):
        heap.free(addr + 1)
    with pytest.raises(ValueError):
        heap.free(addr + 4096)
    heap.free(addr)
    with pytest.raises(ValueError):
        heap.free(addr)


def test_exhaust_then_recover():
    heap = Heap(limit=HEADER_SIZE * 4096 * 4)
    taken = []
    with pytest.raises(MemoryError):
        while True:
            taken.append(heap.malloc(10001))
    assert taken
    for addr in taken:
        heap.free(addr)
    big = heap.malloc(1024 * 20)
    assert big % HEADER_SIZE == 0
    heap.free(big)
    assert len(heap.free_blocks()) == 1