"""Shared utilities and helpers."""
from tilestitch.shared.progress import ConsoleProgress

__all__ = [
    'ConsoleProgress',
]
