"""
Operations Layer

Business logic that composes store methods into validated, atomic workflows.

Architecture:
- Database layer: data access and CRUD over fighters, fights and champions
- Operations layer: validation, identity changes and recompute sequencing
- Command layer: Discord integration and user interface

Modules:
- IdentityNormalizer: name resolution, renames and cascading deletes
- MutationGateway: the single entry point for every write
"""
