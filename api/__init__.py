"""HTTP service for the sponsor matcher."""
