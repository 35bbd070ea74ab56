"""Configuration flags for loading time zone data.

Flags are scoped with context managers and stored in context variables so
they apply only to the current thread or task.
"""

from collections.abc import Generator
import contextlib
import contextvars


_system_tzpath_preferred = contextvars.ContextVar(
    "system_tzpath_preferred", default=False
)


@contextlib.contextmanager
def prefer_system_tzpath() -> Generator[None]:
    """Context manager to read system TZif files before the tzdata package."""
    token = _system_tzpath_preferred.set(True)
    try:
        yield
    finally:
        _system_tzpath_preferred.reset(token)


def is_system_tzpath_preferred() -> bool:
    """Check if system TZif files are read before the tzdata package."""
    return _system_tzpath_preferred.get()
