"""Runtime helpers: logging and handler dispatch."""
