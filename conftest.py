"""
Root conftest: puts the repository root on sys.path so tests can import
``src`` and ``profile_service`` without an install.
"""
