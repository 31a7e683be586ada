"""Concurrency primitives used by the retry executors."""

from .cancel import CancelToken

__all__ = ["CancelToken"]
