"""Framework-free chat helpers: citation rendering, note references, message state."""
