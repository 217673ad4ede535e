# A base class for all custom service-related exceptions.
# Every subclass carries the HTTP status the views report it with.
class ServiceError(Exception):
    """Base class for service-related errors."""
    status_code = 500

    def __init__(self, message: str = "Server error"):
        super().__init__(message)
        self.message = message


# Client-caused problems: reported immediately, generation is never attempted.
class InputValidationError(ServiceError):
    """Raised when request input (text, test type, count) is unacceptable."""
    status_code = 400


class FileProcessingError(ServiceError):
    """Raised when an uploaded file is rejected or yields no text."""
    status_code = 400


class FileTooLargeError(FileProcessingError):
    """Raised when an upload exceeds the configured size cap."""
    status_code = 413


# Upstream problems: the generator misbehaved, not the caller.
class APIIntegrationError(ServiceError):
    """Raised when there is an issue with a third-party API integration."""
    status_code = 502


class MalformedLLMOutputError(APIIntegrationError):
    """Raised when the LLM response cannot be parsed as a JSON object at all."""
    pass


# Quiz-taking flow.
class InvalidAnswerError(ServiceError):
    """Raised when a submitted answer is blank or does not fit the question."""
    status_code = 400


class QuizSessionError(ServiceError):
    """Raised when an action does not fit the current quiz session state."""
    status_code = 409


class NoActiveQuizError(QuizSessionError):
    status_code = 404

    def __init__(self, message: str = "No quiz in progress. Generate a test first."):
        super().__init__(message)
