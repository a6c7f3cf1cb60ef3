"""Unpacked output layer.

This package materializes item payloads and tag records on disk and
exports them to S3. It also hosts the high-level SDK client.
"""
