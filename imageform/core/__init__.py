"""Core submission handling package.

Composition:
    - `handler`: validation, prompt adaptation, delegation, error normalization.
    - `submission`: inbound field parsing into `Submission`.
    - `result_types`: tagged generation results consumed by adapters.
    - `errors`: shared exception hierarchy.
    - `messages`: user-facing strings.
"""
