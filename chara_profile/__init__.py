"""Character profile generation service."""
