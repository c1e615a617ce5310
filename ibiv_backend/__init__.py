"""
ibiv backend: HTTP server, media classification and thumbnail pipeline.
"""
__version__ = "0.1.0"
