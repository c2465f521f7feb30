from .builder import (
    DocumentReport,
    SignatureProcessingFailure,
    SignatureReportBuilder,
    SignatureReportEntry,
    build_report,
)
from .xml_report import ReportAssembler

__all__ = [
    'DocumentReport',
    'ReportAssembler',
    'SignatureProcessingFailure',
    'SignatureReportBuilder',
    'SignatureReportEntry',
    'build_report',
]
