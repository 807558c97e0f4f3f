"""NetworkX views over the stored dependency graph."""
