# phi_guard/engine/__init__.py

"""Engine package providing pattern recognizers, detection, and redaction.

This package wraps the pattern registry in Presidio recognizers and builds
the detector and redactor on top of them.
"""
