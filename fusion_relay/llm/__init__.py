"""Text-model access package.

Architectural role:
    Provides provider configuration and the transport adapter used by the
    relay engine to invoke the text-generation backend.

Module split:
    - `provider_config`: environment-driven endpoints, tunables and credential.
    - `client`: `generateContent` transport and structured-idea parsing.
"""
