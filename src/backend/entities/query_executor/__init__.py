"""Query Executor package for running validated statements."""

from .executor import execute_query

__all__ = ["execute_query"]
