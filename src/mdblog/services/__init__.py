"""Service entry points (CLI)."""
