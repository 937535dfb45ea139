"""Adapters binding the core ports to storage, HTTP and logging."""
