"""Conversion core: delimiters, markup tree, normalization and parser."""
