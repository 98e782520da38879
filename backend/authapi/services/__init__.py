"""Service layer.

Application services orchestrate repositories (through a Unit of Work) and
adapters behind ports. Import them from their subpackages:

- :mod:`authapi.services.tokens` -- token pair issuing and verification
- :mod:`authapi.services.revocation` -- dual-store token revocation
- :mod:`authapi.services.auth` -- account lifecycle and sessions
"""
