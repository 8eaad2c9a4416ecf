# tests/__init__.py
"""
Test Suite for emoji-index

Organization:
- Domain and adapter tests run against tmp_path and mocked HTTP sessions.
- Provider tests use in-memory sources and a real DiskCache under tmp_path.
"""
