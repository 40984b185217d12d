"""Client-side generation stack: HTTP wrapper, cache, backend detection, orchestrator."""
