# errors.py
# Error taxonomy and the result object returned by every service operation

from dataclasses import dataclass
from typing import Any, Optional


class FestivalError(Exception):
    """Base class for all domain errors."""

    code = 'error'

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class AuthorizationError(FestivalError):
    """Raised by the access gate. Never converted into a Result."""

    code = 'forbidden'


class NotFoundError(FestivalError):
    code = 'not_found'


class InvalidTransitionError(FestivalError):
    code = 'invalid_transition'


class ValidationError(FestivalError):
    code = 'validation_error'


class DataAccessError(FestivalError):
    code = 'data_access_error'


@dataclass
class Result:
    success: bool
    data: Any = None
    error: Optional[FestivalError] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data=None, message=None):
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error):
        return cls(success=False, error=error)

    @property
    def error_message(self):
        return self.error.message if self.error else None

    def to_dict(self, serialize=None):
        if not self.success:
            return {'success': False, 'error': self.error_message, 'code': self.error.code}
        data = self.data
        if serialize is not None and data is not None:
            data = serialize(data)
        payload = {'success': True, 'data': data}
        if self.message:
            payload['message'] = self.message
        return payload
