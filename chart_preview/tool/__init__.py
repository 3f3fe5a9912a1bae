"""Command line tool for chart-preview."""
