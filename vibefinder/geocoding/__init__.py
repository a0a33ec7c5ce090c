"""
Location services via the Google Maps Geocoding and Places APIs.

Responsibilities:
- Turn venue addresses into coordinates and back.
- Look up places by id, text query or proximity.
- Cache provider answers: a day for geocoding, half an hour for places.
"""
