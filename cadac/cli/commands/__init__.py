"""
CLI command implementations.
"""

from cadac.cli.commands.graph import cmd_graph
from cadac.cli.commands.parse import cmd_parse
from cadac.cli.commands.run import cmd_run

__all__ = ["cmd_graph", "cmd_parse", "cmd_run"]
