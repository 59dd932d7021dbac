"""Domain layer — definition models, criteria, and the fluent query builder.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
