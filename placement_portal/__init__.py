"""
Campus Placement Portal
Student KYC profiles, eligibility-gated job applications and placement tracking.

Architecture:
- PostgreSQL: Structured data (users, profiles, jobs, applications, placements)
- MongoDB: Notifications and audit events, never on the critical path
"""

__version__ = "1.0.0"
