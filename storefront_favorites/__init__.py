"""Storefront favorites synchronisation service."""
