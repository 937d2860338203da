"""
Scheduling primitives: injectable clock and the backend admission queue.

Components:
- Clock / SystemClock / ManualClock: time source and one-shot timers
- AdmissionQueue: single-flight, rate-limited FIFO executor
"""

from inline_completion.scheduling.clock import Clock, ManualClock, SystemClock, TimerHandle
from inline_completion.scheduling.admission_queue import AdmissionQueue, QueuedTask

__all__ = [
    "Clock",
    "ManualClock",
    "SystemClock",
    "TimerHandle",
    "AdmissionQueue",
    "QueuedTask",
]
