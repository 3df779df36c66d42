"""
getcreds: obtain short-lived SSH and X.509 certificates from a certificate issuer.
"""

__version__ = "0.1.0"
