"""Adapters translating external formats to and from domain records."""
