"""System feature: banner, index and health endpoints."""
