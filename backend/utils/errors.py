"""
API error types.
Raised by the service layer and rendered as {"error", "message"} JSON bodies
by the handler registered in main_api.
"""


class ApiError(Exception):
    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str = None, error: str = None):
        super().__init__(message or error or self.error)
        self.message = message
        if error:
            self.error = error

    def to_dict(self) -> dict:
        body = {"error": self.error}
        if self.message:
            body["message"] = self.message
        return body


class BadRequestError(ApiError):
    status_code = 400
    error = "Bad request"


class NotFoundError(ApiError):
    status_code = 404
    error = "Not found"


class ConflictError(ApiError):
    status_code = 409
    error = "Conflict"
