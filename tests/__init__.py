"""
docschema test suite.

This package contains:
- unit/: Pure functions, codecs, configuration and the in-memory store
- integration/: Schema nodes read and written through InMemoryDocumentStore
"""
