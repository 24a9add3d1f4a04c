"""Terminal presentation: key input and conversation output."""

from workday_agent.presentation.cli import CliInterface, key_label, print_cli_header
from workday_agent.presentation.keyboard import KeyboardReader, decode_keys

__all__ = [
    "CliInterface",
    "KeyboardReader",
    "decode_keys",
    "key_label",
    "print_cli_header",
]
