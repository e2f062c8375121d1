"""Domain error taxonomy for the form submission engine.

Routes never build status codes from these directly; the mapping to
problem+json lives in `form_service.http.error_mapping`.
"""

from __future__ import annotations


class FormServiceError(Exception):
    """Base class for every error the engine raises on purpose."""

    def __init__(self, reason: str, *, component_id: str | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.component_id = component_id


class InputShapeError(FormServiceError, ValueError):
    """Malformed request body or identifier; raised before repository access."""


class NotFoundError(FormServiceError):
    pass


class FormNotFoundError(NotFoundError):
    def __init__(self, form_id: str) -> None:
        super().__init__("Form not found.")
        self.form_id = form_id


class SubmissionNotFoundError(NotFoundError):
    def __init__(self, form_id: str, submission_id: str) -> None:
        super().__init__("Submission not found for this form.")
        self.form_id = form_id
        self.submission_id = submission_id


class SubmissionValidationError(FormServiceError):
    """Submitted data was wrong; nothing was persisted."""


class EmptyFormError(SubmissionValidationError):
    def __init__(self, form_id: str) -> None:
        super().__init__("Form has no components to answer.")
        self.form_id = form_id


class UnknownComponentError(SubmissionValidationError):
    def __init__(self, component_id: str) -> None:
        super().__init__(
            f"Answer references unknown component ID {component_id}.",
            component_id=component_id,
        )


class AnswerRejectedError(SubmissionValidationError):
    pass


class PersistenceError(FormServiceError):
    """Otherwise-valid data could not be saved; the transaction was rolled back."""


__all__ = [
    "FormServiceError",
    "InputShapeError",
    "NotFoundError",
    "FormNotFoundError",
    "SubmissionNotFoundError",
    "SubmissionValidationError",
    "EmptyFormError",
    "UnknownComponentError",
    "AnswerRejectedError",
    "PersistenceError",
]
