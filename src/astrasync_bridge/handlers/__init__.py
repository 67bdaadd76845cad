"""Tool handlers and their text renderings."""
