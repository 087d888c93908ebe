"""Read-only HTTP API over the stored sensor readings."""
