"""freedb ingest - Dump ingestion service.

Walks a freedb directory tree or tar archive, parses every dump, and
writes discs and tracks inside a single transaction per run.
"""

__all__: list[str] = []
