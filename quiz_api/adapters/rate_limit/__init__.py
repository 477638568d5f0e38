"""Rate limiting adapters.

The render route starts with an in-memory limiter; the abstract interface
leaves room for a shared store without changing the API layer.
"""
