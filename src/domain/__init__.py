"""Domain layer: listing, assumption and query models."""
