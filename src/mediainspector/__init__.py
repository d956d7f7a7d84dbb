"""MediaInspector - remediation policy engine for media libraries."""

__version__ = "0.1.0"
