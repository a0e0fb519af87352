"""vulngate - build-time dependency vulnerability gate.

Decides which dependency groups of a build are scanned, translates the scan
policy into OWASP dependency-check settings, drives the analysis and fails
the build according to the policy.
"""

__version__ = "0.1.0"
