"""
FastAPI RESTful API for the product catalog.

This package provides a REST API for:
- Product listing with filtering, sorting and field projection
- Single product CRUD over a MongoDB collection
- Optional shared-secret API key authentication on writes
"""
