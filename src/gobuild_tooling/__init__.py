"""gobuild tooling: cross-compile Go packages per target OS and pack the results."""

__version__ = "0.1.0"
