"""Dataset-independent tooling: cache, archive lookup, row decoding, metadata.

Nothing here knows about a specific FSO dataset; the dataset modules under
``swissdata.fso`` supply the naming conventions and record layouts.
"""
