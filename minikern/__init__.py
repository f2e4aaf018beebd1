"""A small simulated i386 hobby kernel and its freestanding C library routines."""

__version__ = "0.1.0"