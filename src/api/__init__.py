"""HTTP API layer built on FastAPI and Starlette.

Key components:
- **endpoint**: ``Endpoint`` base class with the MessagePack send helpers
- **sending**: Response context, dispatcher, created-at resolver, response
  interceptor gate and link generation
- **routing**: Route naming and registration for endpoint classes
- **main**: Application factory and lifecycle logging
- **middleware**: Correlation IDs and centralized error handling
- **schemas**: Error documents and validation failures
- **utils**: orjson and msgpack response classes
"""
