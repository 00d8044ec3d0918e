"""Core orchestration package.

Composition:
    - `engine`: two-stage fusion request lifecycle.
    - `retry`: exponential-backoff retry policy with error classification.
    - `types`: `StructuredIdea` / `FusionResult` data contracts.
    - `errors`: typed relay failures.
"""
