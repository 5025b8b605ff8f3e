"""swissdata: typed access to Swiss Federal Statistical Office registries.

Downloads (with an on-disk cache) and decodes the historicized list of
communes into immutable canton, district and municipality records.
"""
