"""
zkpin - anonymous attestations with threshold reveal.

⚠️ DRAFT — requires crypto review before production use.
"""

__version__ = "0.1.0"
