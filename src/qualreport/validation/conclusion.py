"""
Validation conclusions and their reconciliation.

A signature is typically validated twice upstream: once using the basic
validation process, and once using the long-term validation process, which
additionally takes timestamps and time-dependent revocation/trust status into
account. This module merges both outcomes into a single final conclusion.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from ..ades.report import Indication, IndeterminateSubIndication, SubIndication
from ..general import escape_for_xml

__all__ = [
    'NoteLevel',
    'Note',
    'ValidationConclusion',
    'reconcile',
    'VALID_NO_TIMESTAMP_MESSAGE',
    'INVALID_NO_TIMESTAMP_MESSAGE',
]

logger = logging.getLogger(__name__)


VALID_NO_TIMESTAMP_MESSAGE = (
    'The signature is valid but no timestamp was found: additional assurance '
    'on the signing time may be needed.'
)
"""
Informational note added when a signature without a timestamp passes
basic validation.
"""

INVALID_NO_TIMESTAMP_MESSAGE = (
    'The signature is invalid and no timestamp was found: the long-term '
    'validation process could not improve on the basic validation outcome.'
)
"""
Informational note added when a signature without a timestamp does not pass
basic validation.
"""


class NoteLevel(enum.Enum):
    INFO = 'Info'
    WARNING = 'Warning'
    ERROR = 'Error'


@dataclass(frozen=True)
class Note:
    """
    Diagnostic note attached to a conclusion.
    """

    level: NoteLevel
    text: str

    @classmethod
    def info(cls, text: str) -> 'Note':
        return cls(NoteLevel.INFO, text)

    @classmethod
    def warning(cls, text: str) -> 'Note':
        return cls(NoteLevel.WARNING, text)

    @classmethod
    def error(cls, text: str) -> 'Note':
        return cls(NoteLevel.ERROR, text)


@dataclass(frozen=True)
class ValidationConclusion:
    """
    Conclusion of a validation process for a single signature.
    """

    indication: Indication
    """
    Main indication.
    """

    sub_indication: Optional[SubIndication] = None
    """
    Refinement of the main indication, if any.
    """

    notes: Tuple[Note, ...] = ()
    """
    Diagnostic notes, in the order they should be presented.
    """

    def __post_init__(self):
        sub_indic = self.sub_indication
        if sub_indic is not None and sub_indic.indication != self.indication:
            raise ValueError(
                f"Sub-indication {sub_indic.standard_name} does not refine "
                f"{self.indication.name}"
            )
        if not isinstance(self.notes, tuple):
            object.__setattr__(self, 'notes', tuple(self.notes))

    @property
    def is_valid(self) -> bool:
        return self.indication == Indication.VALID

    @property
    def errors(self) -> Tuple[Note, ...]:
        return self._notes_at(NoteLevel.ERROR)

    @property
    def warnings(self) -> Tuple[Note, ...]:
        return self._notes_at(NoteLevel.WARNING)

    @property
    def infos(self) -> Tuple[Note, ...]:
        return self._notes_at(NoteLevel.INFO)

    def _notes_at(self, level: NoteLevel) -> Tuple[Note, ...]:
        return tuple(n for n in self.notes if n.level == level)

    def with_notes(self, notes: Iterable[Note]) -> 'ValidationConclusion':
        return ValidationConclusion(
            indication=self.indication,
            sub_indication=self.sub_indication,
            notes=tuple(notes),
        )


def _lacks_timestamp(conclusion: ValidationConclusion) -> bool:
    return (
        conclusion.indication == Indication.INDETERMINATE
        and conclusion.sub_indication == IndeterminateSubIndication.NO_TIMESTAMP
    )


def reconcile(
    basic: ValidationConclusion,
    long_term: ValidationConclusion,
    signature_error: Optional[str] = None,
) -> ValidationConclusion:
    """
    Merge the basic and long-term validation conclusions for a signature
    into its final conclusion.

    The long-term conclusion prevails, except when it is indeterminate
    for lack of a timestamp. In that case, the long-term process cannot
    improve on the basic one, and the basic conclusion is taken over instead,
    with an informational note explaining the situation.

    In both cases, the notes of the final conclusion are ordered by
    severity: errors, then warnings, then informational notes.
    Errors are dropped if the long-term conclusion is ``VALID``.
    When the basic conclusion is taken over, the errors and warnings of both
    conclusions are kept (basic ones first). The long-term informational
    notes are only kept if the basic conclusion is not ``VALID``, in which
    case they follow the explanatory note.

    :param basic:
        The conclusion of the basic validation process.
    :param long_term:
        The conclusion of the long-term validation process.
    :param signature_error:
        Error message reported on the signature itself while it was being
        read, if any. This is appended as an informational note.
    :return:
        The final conclusion.
    """
    if _lacks_timestamp(long_term):
        result = basic
        errors = basic.errors + long_term.errors
        warnings = basic.warnings + long_term.warnings
        infos = list(basic.infos)
        if basic.is_valid:
            infos.append(Note.info(VALID_NO_TIMESTAMP_MESSAGE))
        else:
            infos.append(Note.info(INVALID_NO_TIMESTAMP_MESSAGE))
            infos.extend(long_term.infos)
        logger.debug(
            "No timestamp; falling back to basic validation outcome %s",
            basic.indication.name,
        )
    else:
        result = long_term
        errors = () if long_term.is_valid else long_term.errors
        warnings = long_term.warnings
        infos = list(long_term.infos)

    notes = [*errors, *warnings, *infos]
    if signature_error:
        notes.append(Note.info(escape_for_xml(signature_error)))
    return result.with_notes(notes)
