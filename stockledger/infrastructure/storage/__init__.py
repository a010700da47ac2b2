"""Movement Record Store adapters."""
