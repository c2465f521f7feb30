"""
Module for AdES indications.

Defines the main indications and their sub-indications as used in the
simple validation report, based on ETSI EN 319 102-1, clause 5.1.3.
"""

import enum
from typing import Optional

__all__ = [
    'Indication',
    'SubIndication',
    'InvalidSubIndication',
    'IndeterminateSubIndication',
    'sub_indication_by_name',
]


class Indication(enum.Enum):
    """
    Main validation indication.
    """

    VALID = 'VALID'
    INDETERMINATE = 'INDETERMINATE'
    INVALID = 'INVALID'


class SubIndication:
    @property
    def indication(self) -> Indication:
        raise NotImplementedError

    @property
    def standard_name(self) -> str:
        raise NotImplementedError


class InvalidSubIndication(SubIndication, enum.Enum):
    FORMAT_FAILURE = enum.auto()
    HASH_FAILURE = enum.auto()
    SIG_CRYPTO_FAILURE = enum.auto()
    REVOKED = enum.auto()
    SIG_CONSTRAINTS_FAILURE = enum.auto()
    CHAIN_CONSTRAINTS_FAILURE = enum.auto()
    CRYPTO_CONSTRAINTS_FAILURE = enum.auto()
    EXPIRED = enum.auto()
    NOT_YET_VALID = enum.auto()

    @property
    def indication(self) -> Indication:
        return Indication.INVALID

    @property
    def standard_name(self) -> str:
        return self.name


class IndeterminateSubIndication(SubIndication, enum.Enum):
    SIG_CONSTRAINTS_FAILURE = enum.auto()
    CHAIN_CONSTRAINTS_FAILURE = enum.auto()
    CERTIFICATE_CHAIN_GENERAL_FAILURE = enum.auto()
    CRYPTO_CONSTRAINTS_FAILURE = enum.auto()
    EXPIRED = enum.auto()
    NOT_YET_VALID = enum.auto()
    POLICY_PROCESSING_ERROR = enum.auto()
    SIGNATURE_POLICY_NOT_AVAILABLE = enum.auto()
    TIMESTAMP_ORDER_FAILURE = enum.auto()
    NO_SIGNING_CERTIFICATE_FOUND = enum.auto()
    NO_CERTIFICATE_CHAIN_FOUND = enum.auto()
    REVOKED_NO_POE = enum.auto()
    REVOKED_CA_NO_POE = enum.auto()
    OUT_OF_BOUNDS_NO_POE = enum.auto()
    CRYPTO_CONSTRAINTS_FAILURE_NO_POE = enum.auto()
    NO_POE = enum.auto()
    TRY_LATER = enum.auto()
    SIGNED_DATA_NOT_FOUND = enum.auto()
    NO_TIMESTAMP = enum.auto()
    UNEXPECTED_ERROR = enum.auto()
    GENERIC = enum.auto()

    @property
    def indication(self) -> Indication:
        return Indication.INDETERMINATE

    @property
    def standard_name(self) -> str:
        return self.name


_SUB_INDICATIONS_BY_INDICATION = {
    Indication.INVALID: InvalidSubIndication,
    Indication.INDETERMINATE: IndeterminateSubIndication,
}


def sub_indication_by_name(
    indication: Indication, name: Optional[str]
) -> Optional[SubIndication]:
    """
    Look up a sub-indication by its standard name.

    Several names (e.g. ``EXPIRED``) exist under more than one indication,
    so the indication being refined must be passed in as well.

    :param indication:
        The main indication.
    :param name:
        The standard name of the sub-indication. Empty values are allowed.
    :return:
        The sub-indication, or ``None`` if ``name`` is empty.
    :raises ValueError:
        if the name does not refine the given indication.
    """
    if not name:
        return None
    try:
        sub_indic_cls = _SUB_INDICATIONS_BY_INDICATION[indication]
        return sub_indic_cls[name]
    except KeyError:
        raise ValueError(
            f"'{name}' is not a valid sub-indication for {indication.name}"
        )
