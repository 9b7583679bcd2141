"""
auth — User authentication module.

Provides:
  • Signed session token creation & verification
  • Password hashing (bcrypt)
  • Register / Login API routes
  • ``AccessGuard`` and the ``get_current_user`` / ``require_admin``
    FastAPI dependencies
"""
