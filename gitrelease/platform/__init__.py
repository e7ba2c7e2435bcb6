"""Platform helpers: subprocess execution and filesystem writes."""

from .files import atomic_write_text, write_json
from .process import ProcessError, run

__all__ = [
    "ProcessError",
    "atomic_write_text",
    "run",
    "write_json",
]
