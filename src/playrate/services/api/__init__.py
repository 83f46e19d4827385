"""HTTP API clients for the catalog and play-count sources."""
