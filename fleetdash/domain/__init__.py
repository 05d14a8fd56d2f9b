"""Domain layer: API record shapes and pure presentation rules."""
