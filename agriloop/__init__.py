"""AgriLoop marketplace API.

REST service connecting farmers who list agricultural waste with creators
who buy it, backed by MongoDB.
"""

__version__ = "1.0.0"
