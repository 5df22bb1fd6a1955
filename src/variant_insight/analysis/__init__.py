"""Analysis result models, variant prioritisation and prompt construction."""
