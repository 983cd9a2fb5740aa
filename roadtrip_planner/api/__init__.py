"""Planner API: LLM generation, Google Maps enrichment and trip storage."""
