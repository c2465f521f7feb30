"""
Builds the simple validation report of a document.

The report summarises, for every signature in the document, the final
validation conclusion and the qualification level of the signature.
Failures while processing one signature are contained to that signature's
entry; failures to obtain report-level information abort the whole report.
"""

import logging
import traceback
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Mapping, Optional, Tuple

import tzlocal

from ..ades.report import Indication, IndeterminateSubIndication, SubIndication
from ..config.policy import ValidationPolicy
from ..validation.conclusion import Note, ValidationConclusion, reconcile
from ..validation.diagnostic import (
    UNKNOWN_SIGNER,
    DiagnosticData,
    SignatureRecord,
    SignatureScope,
    SignatureType,
)
from ..validation.errors import (
    MissingInputError,
    ReportBuildError,
    SignatureProcessingError,
)
from ..validation.qualified.assess import QualificationClassifier
from ..validation.qualified.q_status import QualificationLevel

__all__ = [
    'SignatureReportEntry',
    'SignatureProcessingFailure',
    'DocumentReport',
    'SignatureReportBuilder',
    'build_report',
    'summarise_exception',
    'MAX_SUMMARY_FRAMES',
]

logger = logging.getLogger(__name__)

SUMMARY_PREAMBLE = 'See log file for full stack trace.\n'

MAX_SUMMARY_FRAMES = 10
"""
Maximal number of stack frames included in the summary of an unexpected
error.
"""

ConclusionMap = Mapping[str, ValidationConclusion]


def _local_now() -> datetime:
    return datetime.now(tz=tzlocal.get_localzone())


@dataclass(frozen=True)
class SignatureReportEntry:
    """
    Report entry for a single signature.
    """

    signature_id: str

    conclusion: ValidationConclusion
    """
    The final conclusion for the signature.
    """

    qualification_level: QualificationLevel = QualificationLevel.NOT_APPLICABLE

    signed_by: Optional[str] = None
    """
    Display name of the signer. ``None`` if the signer could not
    be determined because processing failed.
    """

    signature_type: SignatureType = SignatureType.PRIMARY

    parent_id: Optional[str] = None

    signing_time: Optional[datetime] = None

    signature_format: Optional[str] = None

    scopes: Tuple[SignatureScope, ...] = ()

    @property
    def indication(self) -> Indication:
        return self.conclusion.indication

    @property
    def sub_indication(self) -> Optional[SubIndication]:
        return self.conclusion.sub_indication

    @property
    def notes(self) -> Tuple[Note, ...]:
        return self.conclusion.notes

    @property
    def is_valid(self) -> bool:
        return self.conclusion.is_valid


@dataclass(frozen=True)
class SignatureProcessingFailure:
    """
    Record of an unexpected error while processing a signature.
    """

    signature_id: str
    error: Exception
    summary: str


@dataclass(frozen=True)
class DocumentReport:
    """
    Simple validation report for a document.
    """

    policy_name: str

    policy_description: str

    validation_time: datetime

    document_name: str

    entries: Tuple[SignatureReportEntry, ...]
    """
    One entry per signature, in document order.
    """

    valid_count: int
    """
    Number of signatures with a ``VALID`` final indication.
    """

    total_count: int
    """
    Number of signatures processed, including those for which processing
    failed.
    """

    processing_failures: Tuple[SignatureProcessingFailure, ...] = ()
    """
    Unexpected errors encountered while processing individual signatures.

    .. note::
        This is for diagnostic purposes only; it is not part of the
        serialised report.
    """

    def __post_init__(self):
        if not (0 <= self.valid_count <= self.total_count):
            raise ValueError(
                f"Inconsistent signature counts: {self.valid_count} valid "
                f"out of {self.total_count}"
            )

    def entry_for(self, signature_id: str) -> SignatureReportEntry:
        for entry in self.entries:
            if entry.signature_id == signature_id:
                return entry
        raise KeyError(signature_id)


def summarise_exception(exc: BaseException) -> str:
    """
    Produce a bounded summary of an exception, suitable for inclusion in
    a report.

    The summary includes the stack frames from the point where the exception
    was raised, up to and including the first frame in this module.

    :param exc:
        The exception to summarise.
    :return:
        The summary.
    """
    parts = [SUMMARY_PREAMBLE, f'{exc!r}\n']
    frames = traceback.extract_tb(exc.__traceback__)
    for frame in list(reversed(frames))[:MAX_SUMMARY_FRAMES]:
        parts.append(
            f'  File "{frame.filename}", line {frame.lineno}, '
            f'in {frame.name}\n'
        )
        if frame.filename == __file__:
            break
    return ''.join(parts)


def _failure_entry(
    record: SignatureRecord, failure: SignatureProcessingFailure
) -> SignatureReportEntry:
    conclusion = ValidationConclusion(
        indication=Indication.INDETERMINATE,
        sub_indication=IndeterminateSubIndication.UNEXPECTED_ERROR,
        notes=(Note.info(failure.summary),),
    )
    return SignatureReportEntry(
        signature_id=record.signature_id,
        conclusion=conclusion,
        signature_type=record.signature_type,
        parent_id=record.parent_id,
        signing_time=record.signing_time,
        signature_format=record.signature_format,
        scopes=record.scopes,
    )


def _lookup_conclusion(
    conclusions: ConclusionMap, signature_id: str, process_name: str
) -> ValidationConclusion:
    conclusion = conclusions.get(signature_id)
    if conclusion is None:
        raise MissingInputError(
            f"No {process_name} validation conclusion "
            f"for signature {signature_id}"
        )
    return conclusion


class SignatureReportBuilder:
    """
    Builds the simple report for a document.

    A builder can be reused for several builds, since it doesn't keep state
    between them.

    :param policy:
        The validation policy.
    :param diagnostic_data:
        The diagnostic data of the document.
    :param classifier:
        Qualification classifier. If not specified, the policy's
        qualification rules are used.
    :param clock:
        Callable providing the validation time. Defaults to the current time
        in the local time zone.
    :param abort_on_signature_error:
        If ``True``, an unexpected error while processing a signature aborts
        the whole build instead of being reported in the signature's entry.
    """

    def __init__(
        self,
        policy: Optional[ValidationPolicy],
        diagnostic_data: DiagnosticData,
        classifier: Optional[QualificationClassifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
        abort_on_signature_error: bool = False,
    ):
        self._policy = policy
        self._diagnostic_data = diagnostic_data
        if classifier is None and policy is not None:
            classifier = policy.create_classifier()
        self._classifier = classifier or QualificationClassifier()
        self._clock = clock or _local_now
        self._abort_on_signature_error = abort_on_signature_error

    def build(
        self,
        basic_conclusions: ConclusionMap,
        long_term_conclusions: ConclusionMap,
    ) -> DocumentReport:
        """
        Build the report.

        :param basic_conclusions:
            Conclusions of the basic validation process, by signature ID.
        :param long_term_conclusions:
            Conclusions of the long-term validation process, by signature ID.
        :return:
            The report.
        :raises ReportBuildError:
            if report-level information could not be obtained, if a
            conclusion is missing, or if a signature could not be processed
            and ``abort_on_signature_error`` is set.
        """
        try:
            return self._build(basic_conclusions, long_term_conclusions)
        except ReportBuildError as e:
            if not e.already_reported:
                logger.error(e.failure_message, exc_info=e)
                e.already_reported = True
            raise
        except Exception as e:
            logger.error("Failed to build the document report", exc_info=e)
            raise ReportBuildError(
                f"Failed to build the document report: {e!r}",
                already_reported=True,
            ) from e

    def _build(
        self,
        basic_conclusions: ConclusionMap,
        long_term_conclusions: ConclusionMap,
    ) -> DocumentReport:
        policy_name, policy_description = self._policy_metadata()
        validation_time = self._clock()
        document_name = self._diagnostic_data.document_name()

        entries: List[SignatureReportEntry] = []
        failures: List[SignatureProcessingFailure] = []
        valid_count = 0
        for record in self._diagnostic_data.list_signatures():
            entry, failure = self._process_signature(
                record, basic_conclusions, long_term_conclusions
            )
            entries.append(entry)
            if failure is not None:
                failures.append(failure)
            if entry.is_valid:
                valid_count += 1

        logger.info(
            f"Report for {document_name}: {valid_count} of {len(entries)} "
            f"signatures valid"
        )
        return DocumentReport(
            policy_name=policy_name,
            policy_description=policy_description,
            validation_time=validation_time,
            document_name=document_name,
            entries=tuple(entries),
            valid_count=valid_count,
            total_count=len(entries),
            processing_failures=tuple(failures),
        )

    def _policy_metadata(self) -> Tuple[str, str]:
        policy = self._policy
        if policy is None or not policy.name:
            raise MissingInputError("No validation policy name available")
        return policy.name, policy.description or ''

    def _process_signature(
        self,
        record: SignatureRecord,
        basic_conclusions: ConclusionMap,
        long_term_conclusions: ConclusionMap,
    ) -> Tuple[SignatureReportEntry, Optional[SignatureProcessingFailure]]:
        try:
            entry = self._signature_entry(
                record, basic_conclusions, long_term_conclusions
            )
            return entry, None
        except MissingInputError:
            raise
        except Exception as e:
            sig_id = record.signature_id
            logger.error(
                f"Unexpected error while processing signature {sig_id}",
                exc_info=e,
            )
            failure = SignatureProcessingFailure(
                signature_id=sig_id, error=e, summary=summarise_exception(e)
            )
            if self._abort_on_signature_error:
                raise SignatureProcessingError(
                    f"Processing of signature {sig_id} failed: {e!r}",
                    signature_id=sig_id,
                    already_reported=True,
                ) from e
            return _failure_entry(record, failure), failure

    def _signature_entry(
        self,
        record: SignatureRecord,
        basic_conclusions: ConclusionMap,
        long_term_conclusions: ConclusionMap,
    ) -> SignatureReportEntry:
        sig_id = record.signature_id
        basic = _lookup_conclusion(basic_conclusions, sig_id, 'basic')
        long_term = _lookup_conclusion(
            long_term_conclusions, sig_id, 'long-term'
        )
        conclusion = reconcile(
            basic, long_term, signature_error=record.error_message
        )

        cert_id = record.signing_certificate_id or ''
        if cert_id:
            diag = self._diagnostic_data
            signed_by = diag.display_name(cert_id)
            level = self._classifier.classify(
                diag.certificate_attributes(cert_id),
                diag.trust_service_assertions(cert_id),
            )
        else:
            signed_by = UNKNOWN_SIGNER
            level = QualificationLevel.NOT_APPLICABLE

        return SignatureReportEntry(
            signature_id=sig_id,
            conclusion=conclusion,
            qualification_level=level,
            signed_by=signed_by,
            signature_type=record.signature_type,
            parent_id=record.parent_id,
            signing_time=record.signing_time,
            signature_format=record.signature_format,
            scopes=record.scopes,
        )


def build_report(
    policy: Optional[ValidationPolicy],
    diagnostic_data: DiagnosticData,
    basic_conclusions: ConclusionMap,
    long_term_conclusions: ConclusionMap,
    **kwargs,
) -> DocumentReport:
    """
    Build the simple report for a document in one go.

    Keyword arguments are passed to :class:`SignatureReportBuilder`.
    """
    builder = SignatureReportBuilder(policy, diagnostic_data, **kwargs)
    return builder.build(basic_conclusions, long_term_conclusions)
