"""Service layer — graph building and analysis over the GraphStore."""
