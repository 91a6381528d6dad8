"""Persistence and asset-fetching collaborators used by the API layer."""
