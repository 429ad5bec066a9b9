"""
Storefront administration backend: catalog management and the global trash.
"""
