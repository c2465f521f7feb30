from dataclasses import dataclass
from typing import Optional

from qualreport.cli.config import CLIConfig


@dataclass
class CLIContext:
    """
    Context object holding the settings gathered during the lifetime of a
    CLI invocation. This object is passed around as a ``click`` context
    object.
    """

    config: Optional[CLIConfig] = None
    """
    Values for CLI configuration settings.
    """
