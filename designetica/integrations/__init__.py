"""Figma integrations: REST client, node importer, converter, OAuth2 flow."""
