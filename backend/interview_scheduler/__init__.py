"""Interview availability and scheduling engine."""
