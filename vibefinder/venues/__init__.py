"""
Venues that recommendations point at.

Responsibilities:
- Look venues up by id, name, category or proximity.
- Upsert venues and invalidate their cached copies.
"""
