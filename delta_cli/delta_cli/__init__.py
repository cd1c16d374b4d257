"""Command-line front end for delta_engine."""
