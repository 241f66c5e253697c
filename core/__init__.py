"""Filter pipeline, manifest reading, batch driver and settings."""
