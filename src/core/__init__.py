"""Core domain package for cupcake.

Core contains markup extraction, payload decoding, the event channel and the
ingestion consumer without any Socket.IO or file-specific code, keeping the
pipeline testable in isolation.
"""
