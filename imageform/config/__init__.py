"""Configuration package.

Module split:
    - `settings`: environment-driven, immutable `AppConfig` and model registry.
"""
