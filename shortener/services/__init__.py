"""
Services module for business logic separation.

This module contains the link store, short code generation and snapshot
persistence, kept separate from the API endpoints and storage models.
"""
