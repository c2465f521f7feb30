"""
XML serialisation of the simple validation report.
"""

from datetime import datetime
from typing import Optional

from lxml import etree

from ..general import strip_xml_illegal_chars
from ..validation.diagnostic import SignatureType
from .builder import DocumentReport, SignatureReportEntry

__all__ = ['ReportAssembler', 'SIMPLE_REPORT_NAMESPACE']


SIMPLE_REPORT_NAMESPACE = 'http://dss.esig.europa.eu/validation/simple-report'


def _format_time(dt: datetime) -> str:
    return dt.isoformat(timespec='seconds')


class ReportAssembler:
    """
    Renders a :class:`.DocumentReport` as an XML simple report.

    :param namespace:
        Namespace of the generated elements.
    """

    def __init__(self, namespace: str = SIMPLE_REPORT_NAMESPACE):
        self.namespace = namespace

    def _tag(self, name: str) -> str:
        return str(etree.QName(self.namespace, name))

    def _child(
        self, parent: etree._Element, name: str, text: Optional[str] = None
    ) -> etree._Element:
        child = etree.SubElement(parent, self._tag(name))
        if text is not None:
            child.text = strip_xml_illegal_chars(text)
        return child

    @staticmethod
    def _set(node: etree._Element, attr: str, value: str):
        node.set(attr, strip_xml_illegal_chars(value))

    def to_xml(self, report: DocumentReport) -> etree._Element:
        """
        Build the XML tree for a report.

        :param report:
            The report to render.
        :return:
            The root element.
        """
        root = etree.Element(
            self._tag('SimpleReport'), nsmap={None: self.namespace}
        )
        policy_node = self._child(root, 'Policy')
        self._child(policy_node, 'PolicyName', report.policy_name)
        self._child(
            policy_node, 'PolicyDescription', report.policy_description
        )
        self._child(
            root, 'ValidationTime', _format_time(report.validation_time)
        )
        self._child(root, 'DocumentName', report.document_name)
        for entry in report.entries:
            self._add_signature(root, entry)
        self._child(root, 'ValidSignaturesCount', str(report.valid_count))
        self._child(root, 'SignaturesCount', str(report.total_count))
        return root

    def _add_signature(
        self, root: etree._Element, entry: SignatureReportEntry
    ):
        sig_node = self._child(root, 'Signature')
        self._set(sig_node, 'Id', entry.signature_id)
        if entry.signature_type == SignatureType.COUNTER_SIGNATURE:
            self._set(sig_node, 'Type', entry.signature_type.value)
            self._set(sig_node, 'ParentId', entry.parent_id or '')
        if entry.signature_format:
            self._set(sig_node, 'SignatureFormat', entry.signature_format)

        if entry.signing_time is not None:
            self._child(
                sig_node, 'SigningTime', _format_time(entry.signing_time)
            )
        if entry.signed_by is not None:
            self._child(sig_node, 'SignedBy', entry.signed_by)
        self._child(sig_node, 'Indication', entry.indication.value)
        if entry.sub_indication is not None:
            self._child(
                sig_node, 'SubIndication', entry.sub_indication.standard_name
            )
        for note in entry.notes:
            self._child(sig_node, note.level.value, note.text)
        self._child(
            sig_node, 'SignatureLevel', entry.qualification_level.name
        )
        if entry.scopes:
            scopes_node = self._child(sig_node, 'SignatureScopes')
            for scope in entry.scopes:
                scope_node = self._child(
                    scopes_node, 'SignatureScope', scope.description or None
                )
                self._set(scope_node, 'name', scope.name)
                self._set(scope_node, 'scope', scope.scope_type)

    def serialise(self, report: DocumentReport, pretty_print=True) -> bytes:
        """
        Serialise a report to XML.

        :param report:
            The report to render.
        :param pretty_print:
            Indent the output.
        :return:
            The UTF-8 encoded XML document.
        """
        return etree.tostring(
            self.to_xml(report),
            xml_declaration=True,
            encoding='UTF-8',
            pretty_print=pretty_print,
        )
