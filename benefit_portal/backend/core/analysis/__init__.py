"""Reporting and export of application data."""
