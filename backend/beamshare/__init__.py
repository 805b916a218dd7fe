"""beamshare: share one directory over HTTP with live usage statistics."""

__version__ = "0.1.0"
