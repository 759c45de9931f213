"""devsync CLI.

Inspection tool for sync attachments.

Usage:
    devsync inspect-contacts <file>    List the records of a contacts attachment
    devsync inspect-groups <file>      List the records of a groups attachment
"""

from device_sync.cli.main import app, main

__all__ = ["app", "main"]
