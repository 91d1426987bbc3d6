"""Access-control policies (pure, no I/O)."""
