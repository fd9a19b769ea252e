"""
Venue search engine.

Responsibilities:
- Expand user cuisine, meal and diet preferences into provider keywords.
- Plan a bounded set of provider sub-queries and run them concurrently.
- Merge and deduplicate the results, score them by popularity and distance.
- Apply the best-effort vegetarian filter, rank, truncate and cache.
"""
