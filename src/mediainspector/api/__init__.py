"""HTTP API for MediaInspector."""
