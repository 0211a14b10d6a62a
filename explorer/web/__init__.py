"""Web layer: JSON proxy API, pages and middleware."""
