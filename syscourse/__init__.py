"""Runnable demonstrations of threads, shared memory, message queues and sockets."""

__version__ = "0.1.0"