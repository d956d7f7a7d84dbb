"""Inspection, planning and plan execution."""
