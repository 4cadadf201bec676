"""Core interfaces.

Why:
- Defines contracts (Protocol) implemented by concrete adapters.
- Lets the core depend on abstractions: the services never know whether the
  engine is a jar on disk or a Docker image.
"""
