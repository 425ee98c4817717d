"""Per-site adapter configurations (selectors, JSON paths, endpoints)."""
