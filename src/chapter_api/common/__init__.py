"""Shared infrastructure: configuration, cache, database, errors and HTTP plumbing."""
