"""Grid indexing between world space and cell storage."""
