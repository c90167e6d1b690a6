"""Blood donor search service."""
