"""
auth — User authentication module.

Provides:
  • JWT issuance & validation (PyJWT, HS256, issuer/audience checks)
  • Password hashing (bcrypt, with legacy SHA-256 digest support)
  • Register / Login orchestration and API routes
  • ``get_current_identity`` FastAPI dependency
"""
