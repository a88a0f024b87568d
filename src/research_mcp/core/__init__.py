"""Core functionality for research-mcp."""
