"""Error taxonomy for the task service.

Every error carries the HTTP status the API boundary answers with, so route
handlers raise and the exception handlers in ``api.main`` build the envelope.
"""


class TaskError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TaskError):
    status_code = 400


class InvalidDateFormat(ValidationError):
    pass


class DateInPast(ValidationError):
    pass


class InvalidTranscript(ValidationError):
    pass


class InvalidPagination(ValidationError):
    pass


class DuplicateTask(TaskError):
    status_code = 400

    def __init__(self, message: str = "Task with same title and description already exists"):
        super().__init__(message)


class NotFound(TaskError):
    status_code = 404

    def __init__(self, message: str = "Task not found"):
        super().__init__(message)


class ExternalServiceUnreachable(TaskError):
    status_code = 503

    def __init__(
        self,
        message: str = "Unable to reach AI service. Check network connection or API key.",
    ):
        super().__init__(message)


class InternalError(TaskError):
    status_code = 500
