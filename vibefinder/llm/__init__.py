"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Write short venue descriptions and pick vibe tags from venue details.
- Generate mock trending recommendations for seeding.
- Graceful fallback when the LLM is unavailable or returns invalid output.
"""
