"""Core application constants."""

# Security and redaction
REDACTED = "[REDACTED]"

# Cancellation reasons recorded on request abort tokens
REASON_CLIENT_DISCONNECTED = "client disconnected"
REASON_TRANSPORT_FAILED = "transport write failed"
