"""Read side of the feed: windowed activity queries and per-submission views.

Aggregates (upvote counts, upvoter lists, comment threads) are never stored;
every view is assembled from the append-only relations at call time.
"""
