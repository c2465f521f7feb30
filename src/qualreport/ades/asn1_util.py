from typing import Type

from asn1crypto import x509

__all__ = ['register_x509_extension']


def register_x509_extension(
    dotted_oid: str, readable_name: str, asn1_type: Type
):
    x509.ExtensionId._map[dotted_oid] = readable_name
    x509.Extension._oid_specs[readable_name] = asn1_type
