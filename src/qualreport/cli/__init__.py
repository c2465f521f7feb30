from qualreport.cli._root import cli_root
from qualreport.cli.commands.report import *

__all__ = ['launch', 'cli_root']


def launch():
    cli_root(prog_name='qualreport')
