"""treecmd — recursive directory listing as a tree drawing or JSON document."""

__version__ = "0.1.0"


class TreecmdError(Exception):
    """User-facing CLI error.

    Raised for invalid arguments, malformed patterns, a missing traversal
    root, and other fatal input errors. The message is printed to stderr
    and the process exits with code 1.
    """
