"""dupcheck: retrieval-augmented defect duplicate detection.

New defect text is embedded, matched against stored defects in Weaviate,
and the closest matches are handed to a chat model that decides whether the
new defect shares a root cause with any of them.
"""

__version__ = "0.1.0"
