"""
Persistence layer.

Responsibilities:
- Expose a narrow table-store interface (get / list / upsert / delete).
- Keep rows in process memory by default.
- Talk to a hosted Supabase project when credentials are configured.
"""
