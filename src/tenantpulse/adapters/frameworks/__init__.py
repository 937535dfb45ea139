"""Web framework bindings."""
