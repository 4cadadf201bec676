"""Domain models and pure rules.

Why here:
- Plain, strict data structures (Pydantic v2) and the functions over them.
- Nothing in this package knows about HTTP, subprocesses or the CLI.
"""
