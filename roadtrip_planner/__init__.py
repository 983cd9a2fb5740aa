"""AI-assisted road-trip planner backend."""
