"""
Error taxonomy for the coordinator.
Every error knows the HTTP status it maps to and the JSON body it renders.
"""


class MapReduceError(Exception):
    """Base class for errors surfaced to coordinator clients."""

    status_code = 500
    error = 'MapReduce error'

    def __init__(self, message: str = ''):
        super().__init__(message or self.error)
        self.message = message

    def to_dict(self) -> dict:
        body = {'error': self.error}
        if self.message:
            body['message'] = self.message
        return body


class ValidationError(MapReduceError):
    """Bad request payload (registration, unregistration or job input)."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.error = message

    def to_dict(self) -> dict:
        return {'error': self.error}


class InsufficientWorkersError(MapReduceError):
    """Fewer workers of a kind are registered than the job requires."""

    status_code = 503
    kind = 'worker'

    def __init__(self, required: int, actual: int):
        self.required = required
        self.actual = actual
        super().__init__(
            f"Need at least {required} {self.kind}s, but only {actual} registered"
        )

    @property
    def error(self):
        return f"Insufficient {self.kind} workers"

    @property
    def hint(self):
        return f"Start more {self.kind} workers and register them with the master"

    def to_dict(self) -> dict:
        return {'error': self.error, 'message': self.message, 'hint': self.hint}


class InsufficientMappersError(InsufficientWorkersError):
    kind = 'mapper'


class InsufficientReducersError(InsufficientWorkersError):
    kind = 'reducer'


class AllMappersFailedError(MapReduceError):
    """Every mapper call of a job failed; the job is aborted after MAP."""

    status_code = 500
    error = 'All mappers failed'

    def __init__(self, message: str = 'No mapper returned results'):
        super().__init__(message)


class WorkerCallError(Exception):
    """A single call to a mapper or reducer failed (timeout, connection, status, body)."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
