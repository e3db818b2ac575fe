"""Small helpers shared by routers and services."""
