"""REST API route modules."""
