"""
Core retrieval pipeline.

Chunking, hybrid retrieval, memory-aware context assembly, grounded
synthesis and citation tracking. Providers and storage are injected.
"""
