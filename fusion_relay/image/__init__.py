"""Image generation adapter package.

Scope:
    Builds the styled single-sample `predict` payload and sends it to the
    image model for stage 2 of the relay.

Non-goals:
    - No Base64 decoding of generated images.
    - No file storage of generated images.
"""
