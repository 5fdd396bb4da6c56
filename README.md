# kidneykernel

Pure-Python models of the core pieces of a small teaching kernel. Addresses
are plain integers, so each piece can be stepped through and tested without
real hardware.

## What is inside

- `kidneykernel.placement`: the frame placement policies `NextFit`,
  `FirstFit` and `BestFit`. Each one works on a list of `CoreMapEntry` flags
  and returns a `range` of frame numbers, or raises `AllocError`.
- `kidneykernel.frame_allocator`: `FrameAllocator`, which hands out runs of
  contiguous 4096-byte frames (`PAGE_FRAME_SIZE`). `alloc(n)` returns the
  address of the first frame. `dealloc(address)` frees the whole run and
  returns how many frames it freed. `num_allocated()` gives the number of
  frames in use.
- `kidneykernel.buddy_allocator`: `BuddyAllocator(size, base)`. It splits a
  region into halves on demand and joins freed buddies back together. It also
  has `is_empty()` and `detect_leaks()`, which logs each leaked region
  through `logging`.
- `kidneykernel.dummy_allocator`: `DummyAllocator`, a bump allocator that
  reserves whole frames and never frees them.
- `kidneykernel.subblock_allocator`: `SubblockAllocator`, with one free list
  for each size from 16 to 2048 bytes (`SUBBLOCK_SIZES`). Each list is
  refilled one frame at a time from a frame allocator. Larger requests go
  straight to whole frames. `best_subblock_index(size, align)` picks the list
  for a request.
- `kidneykernel.kernel_allocator`: `KernelAllocator`, which combines the
  allocators above. The first allocation is served by the bump allocator, and
  that allocation places the core map. After `init(mem_upper, base_address)`
  it serves `alloc`/`dealloc` and `frame_alloc`/`frame_dealloc`. `deinit()`
  raises `KernelAllocatorError` if the number of allocations does not match
  the number of deallocations.
- `kidneykernel.vma`: `VMAKind`, `VMA` and `VMAList`. A `VMAList` holds
  non-overlapping areas ordered by address, and has `vma_at`,
  `is_address_range_free` and `add_vma`.
- `kidneykernel.process`: `ProcessControlBlock`, `ProcessTable` and
  `ProcessState`. `ProcessState` allocates 16-bit PIDs and TIDs and raises
  `OverflowError` once a counter wraps.
- `kidneykernel.scheduler`: `ThreadStatus`, the abstract `Scheduler`, and
  `FIFOScheduler`, which takes any objects with a `tid` attribute.
- `kidneykernel.ticket_mutex`: `TicketMutex`, a first-in-first-out mutex.
  Its guards (`TicketMutexGuard`) act as context managers.
- `kidneykernel.rwlock`: `RwLock`, which allows many readers or one writer.
  `read()` and `write()` return guards that act as context managers.
- `kidneykernel.semaphore`: `Semaphore` and `SemaphorePermit`. Releasing a
  permit posts the semaphore back, unless the permit was forgotten with
  `forget()`.
- `kidneykernel.sysclock`: `SystemClock`. `step()` advances the clock by one
  timer interval (`TIMER_INTERRUPT_INTERVAL`). `wakeup_time(duration)`
  returns the clock time at which a sleep of that length would end.
- `kidneykernel.shell` and `kidneykernel.ls_config`: `Shell`, the `rush`
  command, `resolve_path`, and the `ls` option parser `LsConfig`.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
from kidneykernel.placement import BestFit, CoreMapEntry
from kidneykernel.frame_allocator import FrameAllocator

PAGE = 4096
allocator = FrameAllocator(0x100000, [CoreMapEntry() for _ in range(16)], BestFit())
first = allocator.alloc(3)      # 0x100000
second = allocator.alloc(2)     # 0x100000 + 3 * PAGE
allocator.dealloc(first)        # returns 3
print(allocator.num_allocated())  # 2
```

```python
from kidneykernel.kernel_allocator import KernelAllocator

kernel = KernelAllocator()
kernel.init(4096, 0x200000)      # 4 MiB of upper memory; frames start at 0x200000
block = kernel.alloc(24, 8)      # served from the 32-byte subblock list
kernel.dealloc(block, 24, 8)
kernel.deinit()
```

## The shell

```
rush
```

This command reads commands from standard input. Before each command it
shows the prompt `kidney:/$ `. It stops on `exit` or at the end of input.

- `cd [path]`: resolves `.`, `..` and `~/` and changes the working directory.
  With no argument it goes to `/`. A path part that contains `~` is
  rejected, and so are two or more arguments.
- `pwd`: prints the working directory, which always ends in `/`.
- `ls [-1 -l -m -x -a -A ...]`: prints the directory and the parsed
  `LsConfig`.
- `clear`: writes the ANSI clear-screen sequence.
- `exit`: ends the shell.
- `cat` and `echo`: accepted, but do nothing.

Any other command prints `rush: <command>: command not found`.

## What it does not do

These are models, not a running kernel. Nothing is backed by real memory,
and no threads are ever switched. The scheduler only queues objects; it does
not run them. There is no filesystem. Unless you pass an `is_directory`
callback to `Shell`, `cd` accepts any path that resolves. `ls` shows its
settings rather than directory entries. The prompt always shows `/` as the
directory; only `pwd` shows the directory that `cd` changed to.