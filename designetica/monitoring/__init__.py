"""Health monitoring for deployed Designetica endpoints."""
