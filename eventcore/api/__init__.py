"""Read-only HTTP diagnostics for the process-wide dispatcher."""
