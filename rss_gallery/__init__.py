"""RSS Gallery - fetch an RSS feed and serve it as a paginated card gallery."""
