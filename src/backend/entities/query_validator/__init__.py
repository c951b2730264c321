"""Query Validator package for validating structured queries before execution."""

from .validator import find_inlined_literals, placeholder_indices, validate_query

__all__ = ["find_inlined_literals", "placeholder_indices", "validate_query"]
