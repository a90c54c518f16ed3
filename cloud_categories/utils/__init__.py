"""Small helpers shared across the category packages."""
