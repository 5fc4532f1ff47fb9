"""focusguard - Pomodoro focus timer that blocks distracting apps."""

__version__ = "0.3.0"
