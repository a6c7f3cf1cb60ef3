"""Bundle ingestion pipeline.

This package parses ANS-104 bundles, verifies their items, and
fetches missing bundles from a gateway. It feeds items to the
transforms and store layers one bundle at a time.
"""
