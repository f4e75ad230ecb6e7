"""Adapters binding the core pipeline to Socket.IO, HTTP and the filesystem."""
