"""Small helpers shared across the watcher."""
