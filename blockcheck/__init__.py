"""
blockcheck package - Adblock Rule Checker

Modules:
    catalog: Known filter lists and identifier lookup
    transforms: Per-list text transforms applied before cleaning
    cleaner: Rule text sanitizer
    downloader: Concurrent list fetching and ordered aggregation
    sources: Source descriptions and their resolution
    client: Matching engine wrapper and snapshot I/O
    check: Query dispatcher and command-line entry point
"""

__version__ = "1.0.0"
