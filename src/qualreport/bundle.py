"""
Reading validation input bundles.

A bundle gathers everything the report builder consumes for one document:
the diagnostic data (signatures and certificates) and the conclusions of the
basic and long-term validation processes. Bundles are written in YAML
(or JSON, which is a subset of YAML).
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

import yaml
from asn1crypto import pem, x509

from .ades.report import Indication, sub_indication_by_name
from .config.api import check_config_keys, enforce_required_keys, process_enum
from .config.errors import ConfigurationError
from .validation.conclusion import Note, NoteLevel, ValidationConclusion
from .validation.diagnostic import (
    CertificateInfo,
    SignatureRecord,
    SignatureScope,
    SignatureType,
    SimpleDiagnosticData,
)
from .validation.qualified.q_status import CertificateAttributes
from .validation.qualified.tsp import QualifierSet

__all__ = [
    'BundleError',
    'ValidationBundle',
    'parse_bundle',
    'load_bundle',
    'parse_conclusion',
]

logger = logging.getLogger(__name__)


class BundleError(ConfigurationError):
    """Signal a malformed input bundle."""

    pass


@dataclass(frozen=True)
class ValidationBundle:
    diagnostic_data: SimpleDiagnosticData
    basic_conclusions: Dict[str, ValidationConclusion]
    long_term_conclusions: Dict[str, ValidationConclusion]


_ATTRIBUTE_FLAGS = {
    'qcp': 'is_qcp',
    'qcp-plus': 'is_qcp_plus',
    'qcc': 'is_qcc',
    'qcsscd': 'is_qcsscd',
}

_SIGNATURE_TYPES = {
    'primary': SignatureType.PRIMARY,
    'signature': SignatureType.PRIMARY,
    'counter-signature': SignatureType.COUNTER_SIGNATURE,
    'countersignature': SignatureType.COUNTER_SIGNATURE,
}


def _check_keys(what, spec, expected, required=()):
    try:
        check_config_keys(what, expected, spec)
        enforce_required_keys(what, required, spec)
    except BundleError:
        raise
    except ConfigurationError as e:
        raise BundleError(e.msg) from e


def _ensure_list(value, param_name) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise BundleError(f"'{param_name}' must be a list.")
    return value


def _parse_time(value, param_name) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            raise BundleError(
                f"'{param_name}' is not an ISO 8601 date-time: {value}"
            )
    if not isinstance(value, datetime):
        raise BundleError(f"'{param_name}' must be a date-time.")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _parse_note(spec) -> Note:
    if isinstance(spec, str):
        return Note.info(spec)
    _check_keys('note', spec, {'level', 'text'}, required={'text'})
    try:
        level = process_enum(NoteLevel, spec.get('level', 'info'), 'level')
    except ConfigurationError as e:
        raise BundleError(e.msg) from e
    return Note(level, str(spec['text']))


def parse_conclusion(spec) -> ValidationConclusion:
    """
    Parse a validation conclusion from a bundle.

    :param spec:
        Dictionary with an ``indication``, an optional ``sub-indication``
        and an optional list of ``notes``.
    :return:
        A :class:`.ValidationConclusion`.
    :raises BundleError:
        if the conclusion is malformed.
    """
    _check_keys(
        'conclusion',
        spec,
        {'indication', 'sub_indication', 'notes'},
        required={'indication'},
    )
    try:
        indication = process_enum(
            Indication, spec['indication'], 'indication'
        )
        sub_indication = sub_indication_by_name(
            indication, spec.get('sub-indication')
        )
    except ValueError as e:
        raise BundleError(str(e)) from e
    notes = [_parse_note(n) for n in _ensure_list(spec.get('notes'), 'notes')]
    return ValidationConclusion(
        indication=indication,
        sub_indication=sub_indication,
        notes=tuple(notes),
    )


def _parse_scope(spec) -> SignatureScope:
    _check_keys(
        'signature scope',
        spec,
        {'name', 'scope', 'description'},
        required={'name', 'scope'},
    )
    return SignatureScope(
        name=str(spec['name']),
        scope_type=str(spec['scope']),
        description=str(spec.get('description', '')),
    )


def _parse_signature(spec) -> SignatureRecord:
    _check_keys(
        'signature',
        spec,
        {
            'id',
            'type',
            'parent_id',
            'signing_time',
            'format',
            'signing_certificate',
            'error_message',
            'scopes',
        },
        required={'id'},
    )
    type_spec = str(spec.get('type', 'primary')).lower()
    try:
        sig_type = _SIGNATURE_TYPES[type_spec]
    except KeyError:
        raise BundleError(f"Unknown signature type '{type_spec}'")
    scopes = _ensure_list(spec.get('scopes'), 'scopes')
    try:
        return SignatureRecord(
            signature_id=str(spec['id']),
            signature_type=sig_type,
            parent_id=spec.get('parent-id'),
            signing_time=_parse_time(spec.get('signing-time'), 'signing-time'),
            signature_format=spec.get('format'),
            signing_certificate_id=spec.get('signing-certificate'),
            scopes=tuple(_parse_scope(s) for s in scopes),
            error_message=spec.get('error-message'),
        )
    except ValueError as e:
        raise BundleError(str(e)) from e


def _load_cert(path: str) -> x509.Certificate:
    with open(path, 'rb') as inf:
        data = inf.read()
    if pem.detect(data):
        _, _, data = pem.unarmor(data)
    return x509.Certificate.load(data)


def _parse_certificate(spec, base_dir: Optional[str]) -> CertificateInfo:
    _check_keys(
        'certificate',
        spec,
        {
            'id',
            'display_name',
            'attributes',
            'cert_file',
            'service_type',
            'qualifiers',
        },
        required={'id'},
    )
    cert_id = str(spec['id'])
    service_type = spec.get('service-type')
    qualifiers = [
        str(q) for q in _ensure_list(spec.get('qualifiers'), 'qualifiers')
    ]
    cert_file = spec.get('cert-file')
    if cert_file is not None:
        if 'attributes' in spec:
            raise BundleError(
                f"Certificate {cert_id}: 'attributes' and 'cert-file' "
                f"are mutually exclusive."
            )
        if base_dir is not None:
            cert_file = os.path.join(base_dir, cert_file)
        try:
            cert = _load_cert(cert_file)
        except (IOError, ValueError) as e:
            raise BundleError(
                f"Failed to load certificate {cert_id} from {cert_file}: {e}"
            ) from e
        info = CertificateInfo.from_certificate(
            cert_id, cert, service_type=service_type, qualifiers=qualifiers
        )
        display_name = spec.get('display-name')
        if display_name is not None:
            info = CertificateInfo(
                certificate_id=cert_id,
                attributes=info.attributes,
                service_type=service_type,
                qualifiers=info.qualifiers,
                display_name=str(display_name),
            )
        return info

    flags = {}
    for attr in _ensure_list(spec.get('attributes'), 'attributes'):
        try:
            flags[_ATTRIBUTE_FLAGS[str(attr).lower()]] = True
        except KeyError:
            raise BundleError(
                f"Certificate {cert_id}: unknown attribute '{attr}'; "
                f"must be one of {', '.join(_ATTRIBUTE_FLAGS)}."
            )
    return CertificateInfo(
        certificate_id=cert_id,
        attributes=CertificateAttributes(**flags),
        service_type=service_type,
        qualifiers=QualifierSet.from_strings(qualifiers),
        display_name=spec.get('display-name'),
    )


def _parse_conclusions(spec, param_name) -> Dict[str, ValidationConclusion]:
    if spec is None:
        return {}
    if not isinstance(spec, dict):
        raise BundleError(
            f"'{param_name}' must be a dictionary keyed by signature ID."
        )
    result = {}
    for sig_id, conclusion_spec in spec.items():
        try:
            result[str(sig_id)] = parse_conclusion(conclusion_spec)
        except BundleError as e:
            raise BundleError(
                f"Error in {param_name} for signature {sig_id}: {e.msg}"
            ) from e
    return result


def parse_bundle(
    bundle_dict, base_dir: Optional[str] = None
) -> ValidationBundle:
    """
    Parse an input bundle.

    :param bundle_dict:
        The bundle, as a dictionary.
    :param base_dir:
        Directory against which relative certificate file paths
        are resolved.
    :return:
        A :class:`ValidationBundle`.
    :raises BundleError:
        if the bundle is malformed.
    """
    _check_keys(
        'bundle',
        bundle_dict,
        {
            'document_name',
            'signatures',
            'certificates',
            'basic_conclusions',
            'long_term_conclusions',
        },
    )
    signatures: List[SignatureRecord] = [
        _parse_signature(s)
        for s in _ensure_list(bundle_dict.get('signatures'), 'signatures')
    ]
    certificates = [
        _parse_certificate(c, base_dir)
        for c in _ensure_list(bundle_dict.get('certificates'), 'certificates')
    ]
    document_name = bundle_dict.get('document-name')
    diagnostic_data = SimpleDiagnosticData(
        document_name=str(document_name) if document_name is not None else None,
        signatures=signatures,
        certificates=certificates,
    )
    logger.debug(
        f"Read bundle with {len(signatures)} signature(s) and "
        f"{len(certificates)} certificate(s)"
    )
    return ValidationBundle(
        diagnostic_data=diagnostic_data,
        basic_conclusions=_parse_conclusions(
            bundle_dict.get('basic-conclusions'), 'basic-conclusions'
        ),
        long_term_conclusions=_parse_conclusions(
            bundle_dict.get('long-term-conclusions'), 'long-term-conclusions'
        ),
    )


def load_bundle(path: str) -> ValidationBundle:
    """
    Read an input bundle from a YAML or JSON file.

    :param path:
        Path to the bundle file.
    :return:
        A :class:`ValidationBundle`.
    """
    with open(path, 'r', encoding='utf8') as inf:
        try:
            bundle_dict = yaml.safe_load(inf)
        except yaml.YAMLError as e:
            raise BundleError(f"Failed to parse bundle {path}: {e}") from e
    return parse_bundle(
        bundle_dict or {}, base_dir=os.path.dirname(os.path.abspath(path))
    )
