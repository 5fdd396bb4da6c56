"""Simulated kernel components: allocators, VMAs, processes, scheduling, locks, a clock and a shell."""

__version__ = "0.1.0"