"""
Search provider integration layer.

Responsibilities:
- Manage Google Places configuration and credentials.
- Issue Nearby Search calls for individual sub-queries.
- Parse raw provider records into internal venues.
- Fetch extended details for a single place.
"""
