"""treeprint — pretty folder and file structure printer."""

__version__ = "0.1.0"


class TreePrintError(Exception):
    """User-facing CLI error.

    Raised for invalid arguments, missing directories, and other
    recoverable input errors. The message is printed to stderr
    and the process exits with code 1.
    """
