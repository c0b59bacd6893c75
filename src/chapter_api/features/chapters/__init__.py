"""Chapter feature: models, persistence, cached services and routes."""
