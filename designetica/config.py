"""Designetica configuration constants: single source of truth for all env vars."""

import os

# Deployment environment: "development" enables local backend detection
ENVIRONMENT = os.getenv("DESIGNETICA_ENV", "development")
IS_PRODUCTION = ENVIRONMENT.lower() == "production"

# Server binding: used by entrypoint / uvicorn
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "7071"))

# Static backend base URL used in production (no port probing)
API_BASE_URL = os.getenv("DESIGNETICA_API_BASE_URL", "http://localhost:7071").rstrip("/")

# Dev-mode discovered backend port cache (replaces browser local storage)
PORT_CACHE_FILE = os.getenv(
    "DESIGNETICA_PORT_CACHE_FILE",
    os.path.join(os.path.expanduser("~"), ".designetica", "backend_port.json"),
)

# Azure OpenAI: generation backend
AZURE_OPENAI_ENDPOINT = os.getenv("AZURE_OPENAI_ENDPOINT", "").rstrip("/")
AZURE_OPENAI_KEY = os.getenv("AZURE_OPENAI_KEY") or os.getenv("AZURE_OPENAI_API_KEY", "")
AZURE_OPENAI_DEPLOYMENT = os.getenv("AZURE_OPENAI_DEPLOYMENT", "gpt-4o")
AZURE_OPENAI_API_VERSION = os.getenv("AZURE_OPENAI_API_VERSION", "2024-02-15-preview")

# Figma OAuth2 application
FIGMA_CLIENT_ID = os.getenv("FIGMA_CLIENT_ID", "")
FIGMA_CLIENT_SECRET = os.getenv("FIGMA_CLIENT_SECRET", "")
FIGMA_REDIRECT_URI = os.getenv(
    "FIGMA_REDIRECT_URI", "http://localhost:7071/api/figmaOAuthCallback"
)

# Figma REST API: Personal Access Token used when no OAuth token is stored
FIGMA_ACCESS_TOKEN = os.getenv("FIGMA_ACCESS_TOKEN", "")
