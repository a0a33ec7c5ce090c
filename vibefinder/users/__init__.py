"""
User accounts keyed by wallet address.

Responsibilities:
- Persist vibe preferences, saved recommendations and onboarding state.
- Track the subscription tier and decide whether premium is active.
"""
