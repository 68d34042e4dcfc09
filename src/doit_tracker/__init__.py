"""doit: a local todo tracker with natural deadlines and completion streaks."""

__version__ = "0.1.0"
