"""
Backend package for the files manager service.

Provides a FastAPI application exposing health and aggregate-count
endpoints on top of a document store and a key-value cache, plus a
readiness wait used at process start.
"""
