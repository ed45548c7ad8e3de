"""Domain layer: record model, identity resolution and container lifecycle."""
