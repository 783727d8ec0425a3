"""Utility modules for API-specific functionality.

- **responses**: orjson-backed JSON responses for errors and msgpack-backed
  binary responses for endpoint payloads
"""
