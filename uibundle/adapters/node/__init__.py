"""Adapters for Node.js command-line tools."""
