"""freedb ingest - Core library modules.

Provides:
- xmcd dump parsing (field matcher + single-pass parser)
- Disc identity resolution (checksum + shard)
- SQLAlchemy models and sink primitives
"""

__version__ = "0.1.0"
