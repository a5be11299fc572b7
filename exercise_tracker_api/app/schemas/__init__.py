"""
Pydantic schema definitions for API payloads.

Schemas are kept apart from the stored records so that the wire
representation of users and exercises can evolve independently of
the store.
"""
