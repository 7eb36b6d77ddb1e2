"""Satellite catalog ingestion.

This package pages through the remote TLE catalog with bounded
concurrency and resumes from the last completed batch.
"""
