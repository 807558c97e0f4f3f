"""depgraph — dependency manifest graph ingestion and analysis."""

__version__ = "0.1.0"
