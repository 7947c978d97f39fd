class EvaluationError(Exception):
    """Base class for evaluation engine errors."""


class BundleUnavailable(EvaluationError, OSError):
    """Raised when a bundle location cannot be read."""


class MalformedStructuredFile(EvaluationError, ValueError):
    """Raised when a structured-data file (JSON) does not parse.

    Only raised inside the quality evaluator, which records it as a finding.
    """

    def __init__(self, file_name: str, reason: str) -> None:
        super().__init__(f"{file_name}: invalid JSON ({reason})")
        self.file_name = file_name
        self.reason = reason


class InternalEvaluationError(EvaluationError, RuntimeError):
    """Raised for any unexpected fault while evaluating a loaded bundle."""


class ExportError(EvaluationError, RuntimeError):
    """Raised when evaluation results cannot be written out."""
