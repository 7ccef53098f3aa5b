"""Command-line interface for gortex."""
