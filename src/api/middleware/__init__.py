"""FastAPI middleware package for cross-cutting request/response concerns.

- **RequestContextMiddleware**: Manages correlation IDs and request context
- **ErrorHandler**: Centralized exception handling with consistent JSON
  error responses
"""
