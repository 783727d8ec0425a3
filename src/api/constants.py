"""API-related constants."""

# HTTP Status Codes
HTTP_200_OK = 200
HTTP_201_CREATED = 201
HTTP_204_NO_CONTENT = 204
HTTP_400_BAD_REQUEST = 400
HTTP_499_CLIENT_CLOSED_REQUEST = 499
HTTP_500_INTERNAL_SERVER_ERROR = 500

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"
LOCATION_HEADER = "location"

# Content types
BINARY_CONTENT_TYPE = "application/x-msgpack"

# Validation failures without a specific property
GENERAL_ERRORS_PROPERTY = "GeneralErrors"
