# phi_guard/core/__init__.py

"""Core domain models and utilities used across the PHI guard system.

This package provides the pattern registry loader, domain types, vocabulary
constants, and the exception hierarchy shared by the rest of the application.
"""
