"""Prompt and payload construction for fusion requests."""
