"""Errors raised by the assessment, conversation and nearby-care use cases."""


class HealthScanError(Exception):
    """Base error. ``user_message`` is safe to show in the UI."""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None):
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class ConfigurationError(HealthScanError):
    """Raised when the backend credential is missing. Never retried."""

    default_message = "API Key is missing. Please check your environment configuration."


class EmptyResponseError(HealthScanError):
    """Raised when the backend returned no text at all."""

    default_message = "No response received from the model."


class AssessmentDecodeError(HealthScanError):
    """Raised when assessment text does not decode into the response schema."""

    default_message = "The analysis result could not be read. Please try again."


class BackendError(HealthScanError):
    """Raised on transport or service failures of the generative backend."""

    default_message = "Failed to analyze the input. Please try again."


class ChatError(HealthScanError):
    default_message = "Failed to send message."


class SessionBusyError(HealthScanError):
    """Raised when a turn is sent while the previous one is still in flight."""

    default_message = "Please wait for the current answer before asking another question."

