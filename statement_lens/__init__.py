"""Statement Lens: POS statement analysis and chat proxies."""

__version__ = "0.1.0"
