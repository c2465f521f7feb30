import logging

import pytest
import yaml
from click.testing import CliRunner
from lxml import etree

from qualreport import __version__
from qualreport.cli import cli_root
from qualreport.report.xml_report import SIMPLE_REPORT_NAMESPACE
from qualreport.validation.qualified.tsp import CA_QC_URI

NS = {'sr': SIMPLE_REPORT_NAMESPACE}

BUNDLE_PATH = 'bundle.yml'
OUTPUT_PATH = 'report.xml'

BUNDLE = {
    'document-name': 'contract.pdf',
    'signatures': [
        {'id': 'S1', 'signing-certificate': 'C1'},
        {'id': 'S2', 'signing-certificate': 'C2'},
    ],
    'certificates': [
        {
            'id': 'C1',
            'display-name': 'Alice',
            'attributes': ['qcc', 'qcsscd'],
            'service-type': CA_QC_URI,
        },
        {'id': 'C2', 'display-name': 'Bob'},
    ],
    'basic-conclusions': {
        'S1': {'indication': 'VALID'},
        'S2': {'indication': 'VALID'},
    },
    'long-term-conclusions': {
        'S1': {'indication': 'VALID'},
        'S2': {
            'indication': 'INDETERMINATE',
            'sub-indication': 'NO_TIMESTAMP',
        },
    },
}


def _write_yaml(data, fname):
    with open(fname, 'w') as outf:
        yaml.dump(data, outf)


def _write_config(config: dict, fname: str = 'qualreport.yml'):
    _write_yaml(config, fname)


@pytest.fixture
def cli_runner():
    root_logger = logging.getLogger()
    handlers_before = list(root_logger.handlers)
    level_before = root_logger.level
    runner = CliRunner()
    with runner.isolated_filesystem():
        _write_yaml(BUNDLE, BUNDLE_PATH)
        yield runner
    for handler in root_logger.handlers[:]:
        if handler not in handlers_before:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level_before)


def _read_report(fname=OUTPUT_PATH):
    with open(fname, 'rb') as inf:
        return etree.fromstring(inf.read())


def test_report_to_file(cli_runner):
    result = cli_runner.invoke(
        cli_root, ['report', BUNDLE_PATH, '--output', OUTPUT_PATH]
    )
    assert result.exit_code == 0, result.output
    root = _read_report()
    assert root.findtext('sr:DocumentName', namespaces=NS) == 'contract.pdf'
    assert root.findtext('sr:SignaturesCount', namespaces=NS) == '2'
    assert root.findtext('sr:ValidSignaturesCount', namespaces=NS) == '2'
    levels = [
        el.text for el in root.findall('sr:Signature/sr:SignatureLevel', NS)
    ]
    assert levels == ['QUALIFIED_ESIGNATURE', 'ADVANCED_ESIGNATURE']
    s2_info = root.findtext('sr:Signature[@Id="S2"]/sr:Info', namespaces=NS)
    assert 'no timestamp' in s2_info


def test_report_to_stdout(cli_runner):
    result = cli_runner.invoke(cli_root, ['report', BUNDLE_PATH])
    assert result.exit_code == 0, result.output
    assert 'SimpleReport' in result.output
    assert '<SignedBy>Alice</SignedBy>' in result.output


def test_report_with_policy_config(cli_runner):
    _write_config(
        {
            'policy': {
                'name': 'Strict policy',
                'description': 'QES or nothing',
                'qualification-rules': [
                    {
                        'level': 'QUALIFIED_ESIGNATURE',
                        'qualified': True,
                        'sscd': True,
                    }
                ],
            }
        }
    )
    result = cli_runner.invoke(
        cli_root, ['report', BUNDLE_PATH, '--output', OUTPUT_PATH]
    )
    assert result.exit_code == 0, result.output
    root = _read_report()
    assert root.findtext('sr:Policy/sr:PolicyName', namespaces=NS) == (
        'Strict policy'
    )
    levels = [
        el.text for el in root.findall('sr:Signature/sr:SignatureLevel', NS)
    ]
    assert levels == ['QUALIFIED_ESIGNATURE', 'NOT_APPLICABLE']


def test_explicit_config_file(cli_runner):
    _write_config({'policy': {'name': 'Other policy'}}, fname='other.yml')
    result = cli_runner.invoke(
        cli_root,
        ['--config', 'other.yml', 'report', BUNDLE_PATH, '--output', 'r.xml'],
    )
    assert result.exit_code == 0, result.output
    root = _read_report('r.xml')
    assert root.findtext('sr:Policy/sr:PolicyName', namespaces=NS) == (
        'Other policy'
    )


def test_missing_conclusion(cli_runner):
    bundle = dict(BUNDLE)
    bundle['basic-conclusions'] = {'S1': {'indication': 'VALID'}}
    _write_yaml(bundle, 'incomplete.yml')
    result = cli_runner.invoke(cli_root, ['report', 'incomplete.yml'])
    assert result.exit_code == 1
    assert 'Failed to produce report' in result.output
    assert 'S2' in result.output


def test_malformed_bundle(cli_runner):
    _write_yaml({'document-name': 'x.pdf', 'signatures': 'S1'}, 'bad.yml')
    result = cli_runner.invoke(cli_root, ['report', 'bad.yml'])
    assert result.exit_code == 1
    assert 'Failed to read input bundle' in result.output


def test_nonexistent_bundle(cli_runner):
    result = cli_runner.invoke(cli_root, ['report', 'nope.yml'])
    assert result.exit_code == 2


def test_bad_config(cli_runner):
    _write_config({'policy': {'name': 'x', 'qualification-rules': []}})
    result = cli_runner.invoke(cli_root, ['report', BUNDLE_PATH])
    assert result.exit_code == 1
    assert 'Configuration error' in result.output


def test_log_file(cli_runner):
    _write_config(
        {
            'logging': {
                'root-level': 'DEBUG',
                'root-output': 'qualreport.log',
            }
        }
    )
    result = cli_runner.invoke(
        cli_root, ['report', BUNDLE_PATH, '--output', OUTPUT_PATH]
    )
    assert result.exit_code == 0, result.output
    for handler in logging.getLogger().handlers:
        handler.flush()
    with open('qualreport.log', 'r') as log:
        log_content = log.read()
    assert '2 of 2 signatures valid' in log_content


def test_verbose(cli_runner):
    result = cli_runner.invoke(
        cli_root, ['--verbose', 'report', BUNDLE_PATH, '--output', OUTPUT_PATH]
    )
    assert result.exit_code == 0, result.output
    assert logging.getLogger().level == logging.DEBUG


def test_version(cli_runner):
    result = cli_runner.invoke(cli_root, ['--version'])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_module_log_file(cli_runner):
    _write_config(
        {
            'logging': {
                'root-level': 'ERROR',
                'by-module': {
                    'qualreport.report': {
                        'level': 'INFO',
                        'output': 'report.log',
                    }
                },
            }
        }
    )
    report_logger = logging.getLogger('qualreport.report')
    try:
        result = cli_runner.invoke(
            cli_root, ['report', BUNDLE_PATH, '--output', OUTPUT_PATH]
        )
        assert result.exit_code == 0, result.output
        assert not report_logger.propagate
        for handler in report_logger.handlers:
            handler.flush()
        with open('report.log', 'r') as log:
            assert '2 of 2 signatures valid' in log.read()
    finally:
        for handler in report_logger.handlers[:]:
            report_logger.removeHandler(handler)
            handler.close()
        report_logger.setLevel(logging.NOTSET)
        report_logger.propagate = True
