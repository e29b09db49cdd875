"""Vendor price-list import service."""
