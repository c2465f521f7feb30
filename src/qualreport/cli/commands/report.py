import click

from qualreport.bundle import load_bundle
from qualreport.cli._ctx import CLIContext
from qualreport.cli._root import cli_root
from qualreport.cli.runtime import qualreport_exception_manager
from qualreport.cli.utils import logger, readable_file
from qualreport.report.builder import SignatureReportBuilder
from qualreport.report.xml_report import ReportAssembler

__all__ = ['report']


@cli_root.command(help='produce a simple validation report', name='report')
@click.argument('bundle', type=readable_file)
@click.option(
    '--output',
    help='file to write the XML report to [default: stdout]',
    required=False,
    type=click.File('wb'),
)
@click.pass_context
def report(ctx: click.Context, bundle, output):
    ctx_obj: CLIContext = ctx.obj
    config = ctx_obj.config
    with qualreport_exception_manager():
        validation_bundle = load_bundle(bundle)
        builder = SignatureReportBuilder(
            config.policy,
            validation_bundle.diagnostic_data,
            abort_on_signature_error=(
                config.report_settings.abort_on_signature_error
            ),
        )
        doc_report = builder.build(
            validation_bundle.basic_conclusions,
            validation_bundle.long_term_conclusions,
        )
        xml_bytes = ReportAssembler().serialise(doc_report)
    if output is None:
        click.echo(xml_bytes.decode('utf8'), nl=False)
    else:
        output.write(xml_bytes)
        logger.info(f"Wrote report to {output.name}")
