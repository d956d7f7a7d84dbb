"""Data models for media files, tracks and remediation plans."""
