"""Academy CMS server: accounts, session tokens and role-based access."""

__version__ = "1.0.0"
