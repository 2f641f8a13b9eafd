"""
Test suite for the wholesale admin console backend.

Test categories:
- Unit tests: domain helpers, invoice math, document composition, paging
- Service tests: repository and controllers against a fake order service
- API tests: routes through the ASGI app with dependency overrides
"""
