"""Package marker for the profile import service.

Exposes resume import and import-session review over HTTP.
"""

__version__ = "0.1.0"
