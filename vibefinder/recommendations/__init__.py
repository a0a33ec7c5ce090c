"""
Recommendation feed.

Responsibilities:
- Store and look up trending recommendations (by id, venue, location, vibe).
- Filter candidates by location radius, vibe tags and trend score.
- Personalize the candidate list for the user's tier and vibe preferences.
- Generate mock recommendations for demos, optionally through the LLM.
"""
