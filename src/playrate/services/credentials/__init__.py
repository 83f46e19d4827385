"""API credential management."""
