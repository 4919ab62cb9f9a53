"""Loading catalog files from disk, plus the docs they point at.

This is the layer that touches the filesystem. It turns ``catalog-info.yaml``
files into ``EntityWithSource`` snapshots for the pure catalog/graph/tree code.
"""
