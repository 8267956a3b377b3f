"""
Domain layer for otlpinf.
"""
