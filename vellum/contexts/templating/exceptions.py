"""Engine exceptions with template references and machine-readable codes."""

from typing import Any, Dict, List, Optional


class TemplateEngineError(Exception):
    """
    Base exception for template engine failures.

    Attributes:
        message: Error description
        code: Machine-readable error code (e.g., "TEMPLATE_NOT_FOUND")
        template_id: Template the failure concerns, if known
        details: Extra structured context for callers
    """

    code = "TEMPLATE_ENGINE_ERROR"
    retryable = False
    default_user_message = "Something went wrong while processing the template."

    def __init__(
        self,
        message: str,
        template_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.template_id = template_id
        self.details = details or {}

        parts = [message]
        if template_id:
            parts.append(f"Template: {template_id}")

        super().__init__("\n".join(parts))

    @property
    def user_message(self) -> str:
        """Message safe to show to end users."""
        return self.default_user_message

    @property
    def is_retryable(self) -> bool:
        return self.retryable

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "template_id": self.template_id,
            "details": self.details,
            "retryable": self.retryable,
        }


class TemplateNotFoundError(TemplateEngineError):
    """Raised when the registry has no template with the requested id."""

    code = "TEMPLATE_NOT_FOUND"
    default_user_message = "The selected template is not available."

    def __init__(self, template_id: str):
        super().__init__(f"Template not found: {template_id}", template_id=template_id)


class ValidationFailedError(TemplateEngineError):
    """
    Raised when a resume or template fails validation before rendering.

    Attributes:
        errors: The validation issues that caused the failure
    """

    code = "VALIDATION_FAILED"
    default_user_message = "Your resume is missing information the template requires."

    def __init__(self, errors: List[Any], template_id: Optional[str] = None):
        self.errors = list(errors)
        joined = "; ".join(getattr(e, "message", str(e)) for e in self.errors)
        super().__init__(
            f"Validation failed: {joined}",
            template_id=template_id,
            details={"codes": [getattr(e, "code", None) for e in self.errors]},
        )


class RenderFailedError(TemplateEngineError):
    """
    Raised when rendering fails for an unexpected reason.

    Attributes:
        original_error: The exception raised inside the render pipeline
    """

    code = "RENDER_FAILED"
    retryable = True
    default_user_message = "We couldn't render your resume. Please try again."

    def __init__(self, template_id: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        message = "Template rendering failed"
        if original_error:
            message += f"\nOriginal error: {original_error}"
        super().__init__(message, template_id=template_id)


class BindingError(TemplateEngineError):
    """
    Base for failures scoped to one part of the data binding.

    Attributes:
        section_id: Section being bound
        field_id: Field being bound (None for section-level failures)
    """

    code = "BINDING_FAILED"

    def __init__(self, message: str, section_id: str, field_id: Optional[str] = None):
        self.section_id = section_id
        self.field_id = field_id
        scope = f"{section_id}.{field_id}" if field_id else section_id
        super().__init__(f"{message} (at {scope})", details={"scope": scope})


class SectionBindingError(BindingError):
    """Raised inside the binder when a whole section cannot be bound."""


class FieldBindingError(BindingError):
    """Raised inside the binder when a single field cannot be bound."""


class ServiceUnavailableError(TemplateEngineError):
    """Raised when the ATS optimization service cannot produce a report."""

    code = "SERVICE_UNAVAILABLE"
    retryable = True
    default_user_message = "ATS analysis is temporarily unavailable."
