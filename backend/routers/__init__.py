"""API routers for the Grove backend."""
