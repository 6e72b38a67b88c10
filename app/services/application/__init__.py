"""
Application services managed by the ServiceContainer, one instance per process.
"""
