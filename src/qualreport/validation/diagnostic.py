"""
Read-only view on the diagnostic data of a validated document.

The diagnostic data is produced upstream, while parsing the signed document
and validating its signatures. The report builder only consumes it through
the :class:`DiagnosticData` interface.
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from asn1crypto import x509

from .errors import MissingInputError
from .qualified.q_status import CertificateAttributes
from .qualified.tsp import QualifierSet, TrustServiceAssertions

__all__ = [
    'SignatureType',
    'SignatureScope',
    'SignatureRecord',
    'CertificateInfo',
    'DiagnosticData',
    'SimpleDiagnosticData',
    'UNKNOWN_SIGNER',
]

logger = logging.getLogger(__name__)

UNKNOWN_SIGNER = '?'
"""
Display name used when the signer cannot be identified.
"""


class SignatureType(enum.Enum):
    PRIMARY = 'SIGNATURE'
    COUNTER_SIGNATURE = 'COUNTERSIGNATURE'


@dataclass(frozen=True)
class SignatureScope:
    """
    Describes what a signature covers.
    """

    name: str
    """
    Name of the covered object (e.g. a file name).
    """

    scope_type: str
    """
    Kind of scope (e.g. ``FullSignatureScope``).
    """

    description: str = ''


@dataclass(frozen=True)
class SignatureRecord:
    """
    A signature as described by the diagnostic data.
    """

    signature_id: str
    """
    Identifier of the signature, unique within the document.
    """

    signature_type: SignatureType = SignatureType.PRIMARY

    parent_id: Optional[str] = None
    """
    Identifier of the countersigned signature, for counter-signatures.
    """

    signing_time: Optional[datetime] = None
    """
    Claimed signing time.
    """

    signature_format: Optional[str] = None
    """
    Signature format (e.g. ``PAdES-BASELINE-B``).
    """

    signing_certificate_id: Optional[str] = None
    """
    Identifier of the signing certificate, if it could be identified.
    """

    scopes: Tuple[SignatureScope, ...] = ()

    error_message: Optional[str] = None
    """
    Error encountered while reading the signature, if any.
    """

    def __post_init__(self):
        if (
            self.signature_type == SignatureType.COUNTER_SIGNATURE
            and not self.parent_id
        ):
            raise ValueError(
                f"Counter-signature {self.signature_id} must have a parent"
            )

    @property
    def is_counter_signature(self) -> bool:
        return self.signature_type == SignatureType.COUNTER_SIGNATURE


@dataclass(frozen=True)
class CertificateInfo:
    """
    What the diagnostic data knows about a certificate.
    """

    certificate_id: str

    attributes: CertificateAttributes = field(
        default_factory=CertificateAttributes
    )

    service_type: Optional[str] = None
    """
    Service type identifier of the trust service that issued the
    certificate, if the issuer is on a trusted list.
    """

    qualifiers: QualifierSet = field(
        default_factory=lambda: QualifierSet(frozenset())
    )
    """
    Qualifiers of that trust service.
    """

    display_name: Optional[str] = None

    @property
    def trust_service_assertions(self) -> Optional[TrustServiceAssertions]:
        if self.service_type is None and not self.qualifiers:
            return None
        return TrustServiceAssertions.from_service(
            self.service_type, self.qualifiers
        )

    @classmethod
    def from_certificate(
        cls,
        certificate_id: str,
        cert: x509.Certificate,
        service_type: Optional[str] = None,
        qualifiers: Iterable[str] = (),
    ) -> 'CertificateInfo':
        """
        Gather certificate information from an actual certificate.

        :param certificate_id:
            The identifier of the certificate in the diagnostic data.
        :param cert:
            The certificate.
        :param service_type:
            The service type of the issuing trust service, if known.
        :param qualifiers:
            The qualifiers of the issuing trust service.
        """
        return cls(
            certificate_id=certificate_id,
            attributes=CertificateAttributes.from_certificate(cert),
            service_type=service_type,
            qualifiers=QualifierSet.from_strings(qualifiers),
            display_name=_display_name_from_cert(cert),
        )


def _display_name_from_cert(cert: x509.Certificate) -> str:
    subject: x509.Name = cert.subject
    try:
        common_name = subject.native['common_name']
    except KeyError:
        return subject.human_friendly
    # one value per CN attribute if there are several
    if isinstance(common_name, list):
        return ', '.join(common_name)
    return common_name


class DiagnosticData:
    """
    Interface to the diagnostic data of a document.
    """

    def document_name(self) -> str:
        """
        :return:
            The name of the validated document.
        """
        raise NotImplementedError

    def list_signatures(self) -> List[SignatureRecord]:
        """
        :return:
            The signatures in the document, in document order.
        """
        raise NotImplementedError

    def certificate_attributes(
        self, certificate_id: str
    ) -> Optional[CertificateAttributes]:
        """
        :param certificate_id:
            A certificate identifier.
        :return:
            The certificate's self-asserted attributes, or ``None``
            if the certificate is unknown.
        """
        raise NotImplementedError

    def trust_service_assertions(
        self, certificate_id: str
    ) -> Optional[TrustServiceAssertions]:
        """
        :param certificate_id:
            A certificate identifier.
        :return:
            The assertions of the trust service covering the certificate's
            issuer, or ``None`` if the issuer is not on a trusted list.
        """
        raise NotImplementedError

    def display_name(self, certificate_id: str) -> str:
        """
        :param certificate_id:
            A certificate identifier.
        :return:
            A name identifying the holder of the certificate, or
            :const:`UNKNOWN_SIGNER`.
        """
        raise NotImplementedError


class SimpleDiagnosticData(DiagnosticData):
    """
    In-memory diagnostic data.

    :param document_name:
        Name of the validated document.
    :param signatures:
        The signatures in the document.
    :param certificates:
        The certificates referenced by the signatures.
    """

    def __init__(
        self,
        document_name: Optional[str],
        signatures: Iterable[SignatureRecord],
        certificates: Iterable[CertificateInfo] = (),
    ):
        self._document_name = document_name
        self._signatures = list(signatures)
        self._certificates: Dict[str, CertificateInfo] = {
            info.certificate_id: info for info in certificates
        }

    def document_name(self) -> str:
        if self._document_name is None:
            raise MissingInputError("Diagnostic data has no document name")
        return self._document_name

    def list_signatures(self) -> List[SignatureRecord]:
        return list(self._signatures)

    def certificate_attributes(
        self, certificate_id: str
    ) -> Optional[CertificateAttributes]:
        info = self._certificates.get(certificate_id)
        return info.attributes if info is not None else None

    def trust_service_assertions(
        self, certificate_id: str
    ) -> Optional[TrustServiceAssertions]:
        info = self._certificates.get(certificate_id)
        return info.trust_service_assertions if info is not None else None

    def display_name(self, certificate_id: str) -> str:
        info = self._certificates.get(certificate_id)
        if info is None:
            logger.warning(
                f"Certificate {certificate_id} not found in diagnostic data"
            )
            return UNKNOWN_SIGNER
        if not info.display_name:
            return UNKNOWN_SIGNER
        return info.display_name
