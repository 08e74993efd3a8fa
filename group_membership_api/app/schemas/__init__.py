"""
Pydantic schema definitions for API payloads.

Each domain (users, groups) defines its own Pydantic models for request
and response bodies.  Schemas are separated from the table definitions
to decouple API representation from persistence.
"""
