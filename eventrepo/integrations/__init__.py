"""Storage backend integrations."""
