"""Core layer: data models, backend client, data store and UI logic."""
