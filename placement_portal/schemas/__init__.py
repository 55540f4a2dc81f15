"""
Schemas module - Request/Response schemas for API endpoints.

- schemas.py: enums and the API contract (what client sends/receives)
- profile_steps.py: one payload schema per profile wizard step
"""
