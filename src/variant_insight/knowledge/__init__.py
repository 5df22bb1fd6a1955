"""Compiled-in variant knowledge: gene watchlists and the offline knowledge base."""
