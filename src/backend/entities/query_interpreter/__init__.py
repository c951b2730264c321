"""Query Interpreter package for natural-language to SQL translation."""

from .interpreter import interpret, load_prompt

__all__ = ["interpret", "load_prompt"]
