"""Portal backend: HTTP API, domain core, schemas, services and CLI."""
