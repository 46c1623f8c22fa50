"""State/store layer.

This package is the single source of truth for how location records from
the snapshot fetch, the live push stream and local shares are merged into
one ordered, render-ready collection.
"""
