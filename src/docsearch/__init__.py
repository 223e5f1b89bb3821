"""
Docs Search - federated search over statically generated documentation sites.

Two halves:
- pipeline: merges per-project Sphinx search indexes into one snapshot (offline)
- search: loads the snapshot once and ranks documents for free-text queries
"""

__version__ = "0.1.0"
