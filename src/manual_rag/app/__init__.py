"""Application wiring: dependency container and HTTP API."""
