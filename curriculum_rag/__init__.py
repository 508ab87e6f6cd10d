"""Retrieval-augmented knowledge core for curriculum Q&A."""
