"""Generative summarization contract: providers and tolerant JSON parsing."""
