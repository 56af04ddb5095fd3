"""Core module - shared infrastructure.

Holds logging and metrics used by the connector and the synchronizer.
Nothing here knows about selection controls or backend endpoints.
"""

__version__ = "1.0.0"
