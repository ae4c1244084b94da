# phi_guard/service/__init__.py

"""Service layer: settings and the scan workflow that ties the core together."""
