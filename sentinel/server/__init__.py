"""
Sentinel Proxy Server
Flask application relaying analysis and chain-data requests
"""

from .app import create_app

__all__ = ["create_app"]
