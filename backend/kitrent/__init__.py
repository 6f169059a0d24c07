"""Kit rental booking backend."""
