"""Designetica: natural-language to HTML wireframe generation.

Subpackages:
- client: generation orchestrator, wireframe cache, backend detection
- generation: prompt building, AI invocation, post-processing, fallbacks
- integrations: Figma REST client, node importer, OAuth2 flow
- monitoring: HTTP/DNS/TLS health monitor
"""

__version__ = "1.0.0"
