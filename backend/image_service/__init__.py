"""Random image service: a time-windowed, single-flight image cache behind FastAPI."""

__version__ = "0.1.0"
