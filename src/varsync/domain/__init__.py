"""Domain layer — scopes, field rules, schema validation.

This layer depends only on stdlib, pydantic and ruamel.yaml.
It must never import from sync, services, infrastructure, commands, or config.
"""
