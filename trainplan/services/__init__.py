"""Enrichment, parsing and repair of generated plan skeletons."""
