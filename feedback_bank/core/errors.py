from fastapi import status

class FeedbackError(Exception):
    """Base error carrying the HTTP status it should surface as."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class NotFoundError(FeedbackError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str):
        super().__init__(f"{entity} not found")
        self.entity = entity

class ValidationFailed(FeedbackError):
    status_code = status.HTTP_400_BAD_REQUEST
