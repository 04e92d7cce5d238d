"""KSUID errors.

Every error is raised synchronously at the boundary that rejected the input.
None of them are retryable.
"""


class KsuidError(ValueError):
    """Base error carrying the rejected input as context."""

    def __init__(self, message, context=None, cause=None):
        super().__init__(message)
        self.context = context or {}
        self.cause = cause

    def to_dict(self):
        return {"error": type(self).__name__, "detail": str(self), "context": self.context}


class KsuidFormatError(KsuidError):
    """Malformed KSUID string (length or alphabet)."""

    def __init__(self, message, value=None, **kwargs):
        context = kwargs.pop("context", {})
        if value is not None:
            context["value"] = value
        super().__init__(message, context=context, **kwargs)


class KsuidOverflowError(KsuidFormatError):
    """Value does not fit in 160 bits."""


class KsuidArgumentError(KsuidError):
    """Missing or wrong-sized argument passed to a constructor."""

    def __init__(self, message, argument=None, **kwargs):
        context = kwargs.pop("context", {})
        if argument:
            context["argument"] = argument
        super().__init__(message, context=context, **kwargs)
