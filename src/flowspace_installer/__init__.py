"""flowspace-installer: resolve, download, verify and install release binaries."""

__version__ = "0.1.0"
