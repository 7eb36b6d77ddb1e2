"""Storage layer.

This package accumulates converted satellite records and persists
them as a human-diffable JSON array for callers to read.
"""
