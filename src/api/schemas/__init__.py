"""Pydantic schema models for API responses.

- **errors**: The error document returned by every exception handler
- **validation**: Validation failures collected by endpoints and handed to
  response interceptors
"""
