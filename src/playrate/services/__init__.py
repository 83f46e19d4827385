"""Service layer - HTTP clients, credentials and caching."""
