"""Budget and shooting-schedule backend for film production projects."""

__version__ = "1.0.0"
