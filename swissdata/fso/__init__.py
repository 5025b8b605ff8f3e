"""Federal Statistical Office datasets (BFS / OFS / UST).

- ``asset``: download and citation URLs of FSO assets.
- ``communes``: historicized list of communes (cantons, districts, municipalities).
- ``publisher``: translated editor, copyright and terms-of-use links.
"""
