"""
FastAPI JSON API for the books catalogue.

This package exposes a small CRUD surface over a single relational table:
- Listing and creating books on the collection endpoint
- Fetching and deleting a single book by identifier
- Permissive CORS headers on every response
"""
