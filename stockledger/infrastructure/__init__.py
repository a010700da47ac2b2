"""Infrastructure layer - storage adapters and the report cache."""
