"""
General utilities shared by the validation and reporting modules.
"""

import re
from xml.sax.saxutils import escape

__all__ = [
    'ValueErrorWithMessage',
    'escape_for_xml',
    'strip_xml_illegal_chars',
]


class ValueErrorWithMessage(ValueError):
    """
    Value error with a failure message attribute that can be conveniently
    extracted, instead of having to rely on extracting exception args
    generically.
    """

    def __init__(self, failure_message):
        self.failure_message = str(failure_message)
        super().__init__(failure_message)


# XML 1.0 does not admit most C0 control characters, even as references
_XML_ILLEGAL_CHARS = re.compile(
    '[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]'
)


def strip_xml_illegal_chars(text: str) -> str:
    """
    Drop characters that cannot appear in an XML 1.0 document.
    """
    return _XML_ILLEGAL_CHARS.sub('', text)


def escape_for_xml(text: str) -> str:
    """
    Escape markup-significant characters in a free-form message, and drop
    characters that cannot be represented in an XML document at all.

    :param text:
        The text to escape.
    :return:
        The escaped text.
    """
    text = strip_xml_illegal_chars(text)
    return escape(text, {'"': '&quot;', "'": '&apos;'})
