"""Gateway event handlers."""
