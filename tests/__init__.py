"""Test suite for the arazzo-model package.

This package contains unit and integration tests validating
expression parsing, element models, document-wide invariants,
reference resolution and the command-line interface.
"""
