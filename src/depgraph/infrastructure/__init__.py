"""Infrastructure layer — SQLite store, graph gateway, NetworkX view.

This layer depends on stdlib and third-party libs (SQLAlchemy, NetworkX)
plus :mod:`depgraph.errors` and :mod:`depgraph.domain.types`.
It must never import from services, commands, or output.
"""
