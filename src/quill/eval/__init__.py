"""Evaluator helper modules for the Quill runtime."""

__all__ = [
    "blocks",
    "bind",
    "common",
    "control",
    "expr",
    "fn",
    "helpers",
    "literals",
    "loops",
    "selector",
]
