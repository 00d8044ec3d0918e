"""Fusion relay: two-stage text -> image generation behind a small HTTP API."""
