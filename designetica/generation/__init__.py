"""Server-side generation pipeline: prompt -> AI -> post-process, with fallbacks."""
