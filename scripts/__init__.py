"""Command line scripts built on the swissdata package."""
