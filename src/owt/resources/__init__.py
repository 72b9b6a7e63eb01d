"""Bundled data files distributed with owt."""
