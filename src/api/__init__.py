"""
VoidBox HTTP API: routes and request middleware.
"""
