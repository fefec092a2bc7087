from app.schemas.common import ErrorOut


_ERROR_EXAMPLES: dict[int, tuple[str, str]] = {
    400: ("invalid_argument", "Invalid argument or malformed request"),
    404: ("not_found", "Resource not found"),
    409: ("conflict", "Conflicting concurrent write, please retry"),
    500: ("internal_error", "Internal server error"),
    503: ("persistence_error", "Storage failure, no changes were applied"),
}


def error_responses(*status_codes: int) -> dict[int, dict]:
    responses: dict[int, dict] = {}
    for status_code in status_codes:
        code, message = _ERROR_EXAMPLES.get(status_code, ("http_error", "HTTP error"))
        responses[status_code] = {
            "model": ErrorOut,
            "description": message,
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": code,
                            "message": message,
                            "request_id": "request-id",
                            "path": "/inventory/ITM-0001",
                            "details": None,
                        }
                    }
                }
            },
        }
    return responses
