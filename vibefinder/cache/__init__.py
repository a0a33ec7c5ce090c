"""
Ephemeral key-value cache.

Responsibilities:
- Hold short-lived copies of database rows and third-party API responses.
- Expire entries lazily on read once their time-to-live has passed.
- Expose the three canonical TTL presets used by callers.
"""
