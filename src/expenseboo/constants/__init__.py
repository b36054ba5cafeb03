"""Static application constants."""
