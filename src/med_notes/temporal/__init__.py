"""Clock abstraction."""

from med_notes.temporal.clock import Clock, FakeClock, SystemClock

__all__ = ["Clock", "FakeClock", "SystemClock"]
