"""
Infrastructure layer for otlpinf.
"""
