"""Reference mapper and reducer workers."""
