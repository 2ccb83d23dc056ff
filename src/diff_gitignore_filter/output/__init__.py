"""Human-facing output on stderr."""
