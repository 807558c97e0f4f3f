"""Domain layer — manifest records, version rules, and cycle shapes.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
