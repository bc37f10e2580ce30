"""docpub: publish documentation spaces as immutable, content-addressed builds."""

__version__ = "0.1.0"
