"""Day-level processing: result container, pipeline, file I/O and CLI."""
