"""Image generation provider package.

Scope:
    Provides the Cloudflare Workers AI text-to-image client used as the
    handler's generation capability.
"""
