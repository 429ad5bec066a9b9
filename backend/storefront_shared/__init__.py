"""
Shared infrastructure for the storefront admin backend.
"""
