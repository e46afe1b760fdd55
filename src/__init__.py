"""Inkwell Blog API."""
