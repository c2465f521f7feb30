from typing import Optional

from ..general import ValueErrorWithMessage

__all__ = [
    'ReportBuildError',
    'MissingInputError',
    'SignatureProcessingError',
]


class ReportBuildError(ValueErrorWithMessage):
    """
    Error preventing a document report from being produced.

    :param failure_message:
        Human-readable description of the failure.
    :param already_reported:
        Indicates that the failure has already been logged and attributed,
        so that enclosing error handlers don't report it a second time.
    """

    def __init__(self, failure_message, *, already_reported: bool = False):
        self.already_reported = already_reported
        super().__init__(failure_message)


class MissingInputError(ReportBuildError):
    """
    A conclusion, policy setting or document-level field that is required
    to produce the report could not be obtained.
    """

    pass


class SignatureProcessingError(ReportBuildError):
    """
    Escalation of a failure while processing a single signature.
    """

    def __init__(
        self,
        failure_message,
        signature_id: Optional[str] = None,
        *,
        already_reported: bool = False,
    ):
        self.signature_id = signature_id
        super().__init__(failure_message, already_reported=already_reported)
