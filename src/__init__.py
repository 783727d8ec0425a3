"""Packsend - MessagePack response dispatch for Starlette and FastAPI endpoints.

Endpoints answer with compact MessagePack bodies instead of JSON, and can emit
``201 Created`` responses whose ``Location`` header is generated from named
routes.

Architecture Overview:
- **API Layer**: Endpoint base class, response dispatch, routing and middleware
- **Core Layer**: Configuration, logging, exceptions and cancellation tokens
"""
