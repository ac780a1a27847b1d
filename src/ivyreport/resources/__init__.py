"""Stylesheets and assets bundled with generated reports."""
