"""API layer: request/response surface for record queries.

Rules:

1. No SQLAlchemy imports - the store is passed in by the caller
2. Wire parsing and envelope shaping live here, never in the engine
3. Every response carries the request's accumulated logs
"""
