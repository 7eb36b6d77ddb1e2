"""HTTP surface.

This module exposes the ingest trigger and the store read
as two JSON routes for browser clients.
"""
