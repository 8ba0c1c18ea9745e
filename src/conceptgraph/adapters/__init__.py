"""Adapters connecting the concept graph core to storage and wire formats."""
