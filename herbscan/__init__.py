"""
herbscan: scan a product QR code (or paste its content), resolve it against
the lookup service and render the result.
"""

__version__ = "1.0.0"
