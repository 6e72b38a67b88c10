"""
Delivery backends and helpers used by the application services.
"""
