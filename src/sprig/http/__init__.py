"""HTTP value objects — Request, Response, and their supporting types."""
