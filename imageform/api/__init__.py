"""Adapter package for the HTTP and CLI interfaces.

Architectural role:
- Defines the external interaction boundary (FastAPI app, server entrypoint, CLI).
- Performs transport-level parsing and response shaping.
- Delegates validation and generation to `imageform.core.handler`.
"""
