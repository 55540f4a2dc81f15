"""
Relational schema - table definitions for the placement portal.

Queries elsewhere are written as raw SQL with ``text()``; these definitions
exist so the schema can be created (and dropped in tests) from one place on
PostgreSQL and SQLite alike.

Tables:
- users               - mirror of identity-provider accounts + role
- profiles            - one flat row per student (wizard sections flattened)
- jobs / job_branches - postings and their allowed branches (empty = all)
- applications        - UNIQUE (job_id, user_id), soft-deleted via is_removed
- placements          - secured offers, drive the tier-lock
- interview_schedules - created when an application moves to INTERVIEW_SCHEDULED
"""

from sqlalchemy import (
    Boolean, Column, DateTime, Float, ForeignKey, Integer, MetaData, String,
    Table, Text, UniqueConstraint, false, func, true
)

metadata = MetaData()


users = Table(
    "users", metadata,
    Column("user_id", String(64), primary_key=True),
    Column("email", String(255), unique=True, nullable=True),
    Column("name", String(200)),
    Column("role", String(20), nullable=False, server_default="STUDENT"),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
)


profiles = Table(
    "profiles", metadata,
    Column("profile_id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(64), ForeignKey("users.user_id", ondelete="CASCADE"), unique=True, nullable=False),

    # Step 1 - personal info
    Column("first_name", String(100)),
    Column("middle_name", String(100)),
    Column("last_name", String(100)),
    Column("date_of_birth", String(10)),
    Column("gender", String(10)),
    Column("blood_group", String(20)),
    Column("state_of_domicile", String(100)),
    Column("nationality", String(50)),
    Column("caste_category", String(10)),
    Column("profile_photo", Text),

    # Step 2 - contact & parents
    Column("email", String(255)),
    Column("calling_mobile", String(15)),
    Column("whatsapp_mobile", String(15)),
    Column("alternative_mobile", String(15)),
    Column("father_name", String(100)),
    Column("father_deceased", Boolean),
    Column("father_mobile", String(15)),
    Column("father_email", String(255)),
    Column("father_occupation", String(100)),
    Column("mother_name", String(100)),
    Column("mother_deceased", Boolean),
    Column("mother_mobile", String(15)),
    Column("mother_email", String(255)),
    Column("mother_occupation", String(100)),

    # Step 3 - address
    Column("current_address", Text),
    Column("permanent_address", Text),
    Column("same_as_current", Boolean),
    Column("country", String(50)),

    # Steps 4/5 - 10th and 12th
    Column("tenth_school_name", String(200)),
    Column("tenth_city", String(100)),
    Column("tenth_district", String(100)),
    Column("tenth_pincode", String(6)),
    Column("tenth_state", String(100)),
    Column("tenth_board", String(10)),
    Column("tenth_passing_year", Integer),
    Column("tenth_passing_month", Integer),
    Column("tenth_marks_type", String(20)),
    Column("tenth_percentage", Float),
    Column("tenth_subjects", Integer),
    Column("tenth_total_marks", Float),
    Column("tenth_marks_out_of_1000", Float),
    Column("tenth_marks_card", Text),
    Column("twelfth_school_name", String(200)),
    Column("twelfth_city", String(100)),
    Column("twelfth_district", String(100)),
    Column("twelfth_pincode", String(6)),
    Column("twelfth_state", String(100)),
    Column("twelfth_board", String(10)),
    Column("twelfth_passing_year", Integer),
    Column("twelfth_passing_month", Integer),
    Column("twelfth_marks_type", String(20)),
    Column("twelfth_percentage", Float),
    Column("twelfth_subjects", Integer),
    Column("twelfth_total_marks", Float),
    Column("twelfth_marks_out_of_1000", Float),
    Column("twelfth_marks_card", Text),

    # Step 6 - engineering
    Column("college_name", String(200)),
    Column("college_city", String(100)),
    Column("college_district", String(100)),
    Column("college_pincode", String(6)),
    Column("college_state", String(100)),
    Column("branch", String(10)),
    Column("batch", String(4)),
    Column("entry_type", String(10)),
    Column("seat_category", String(15)),
    Column("usn", String(20), unique=True),
    Column("library_id", String(50)),
    Column("residency_status", String(10)),
    Column("hostel_name", String(100)),
    Column("room_number", String(20)),
    Column("floor_number", String(20)),
    Column("local_city", String(100)),
    Column("transport_mode", String(20)),
    Column("bus_route", String(50)),
    Column("cgpa", Float),

    # Step 7 - final KYC
    Column("final_cgpa", Float),
    Column("active_backlogs", Boolean, nullable=False, server_default=false()),
    Column("backlog_count", Integer, nullable=False, server_default="0"),
    Column("backlog_subjects", Text),
    Column("branch_mentor_name", String(100)),
    Column("linkedin", Text),
    Column("github", Text),
    Column("leetcode", Text),
    Column("resume", Text),

    # Wizard / verification state
    Column("completion_step", Integer, nullable=False, server_default="1"),
    Column("is_complete", Boolean, nullable=False, server_default=false()),
    Column("kyc_status", String(20), nullable=False, server_default="INCOMPLETE"),
    Column("kyc_remarks", Text),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
    Column("updated_at", DateTime, nullable=False, server_default=func.now()),
)


jobs = Table(
    "jobs", metadata,
    Column("job_id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(200), nullable=False),
    Column("company_name", String(200), nullable=False),
    Column("description", Text),
    Column("location", String(200)),
    Column("salary", String(100)),
    Column("tier", String(10), nullable=False, server_default="TIER_3"),
    Column("is_dream_offer", Boolean, nullable=False, server_default=false()),
    Column("min_cgpa", Float),
    Column("eligible_batch", String(4)),
    Column("max_backlogs", Integer),
    Column("status", String(10), nullable=False, server_default="DRAFT"),
    Column("is_visible", Boolean, nullable=False, server_default=true()),
    Column("deadline", DateTime),
    Column("created_by", String(64), ForeignKey("users.user_id")),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
    Column("updated_at", DateTime, nullable=False, server_default=func.now()),
)


job_branches = Table(
    "job_branches", metadata,
    Column("job_id", Integer, ForeignKey("jobs.job_id", ondelete="CASCADE"), primary_key=True),
    Column("branch", String(10), primary_key=True),
)


applications = Table(
    "applications", metadata,
    Column("application_id", Integer, primary_key=True, autoincrement=True),
    Column("job_id", Integer, ForeignKey("jobs.job_id", ondelete="CASCADE"), nullable=False),
    Column("user_id", String(64), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("status", String(25), nullable=False, server_default="APPLIED"),
    Column("is_removed", Boolean, nullable=False, server_default=false()),
    Column("resume_used", Text),
    Column("feedback", Text),
    Column("applied_at", DateTime, nullable=False, server_default=func.now()),
    Column("updated_at", DateTime, nullable=False, server_default=func.now()),
    UniqueConstraint("job_id", "user_id", name="uq_applications_job_user"),
)


placements = Table(
    "placements", metadata,
    Column("placement_id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(64), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
    Column("job_id", Integer, ForeignKey("jobs.job_id", ondelete="SET NULL")),
    Column("company_name", String(200), nullable=False),
    Column("tier", String(10), nullable=False),
    Column("is_exception", Boolean, nullable=False, server_default=false()),
    Column("package_lpa", Float),
    Column("placed_at", DateTime, nullable=False, server_default=func.now()),
)


interview_schedules = Table(
    "interview_schedules", metadata,
    Column("schedule_id", Integer, primary_key=True, autoincrement=True),
    Column("application_id", Integer, ForeignKey("applications.application_id", ondelete="CASCADE"), nullable=False),
    Column("user_id", String(64), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("scheduled_at", DateTime, nullable=False),
    Column("mode", String(10), nullable=False, server_default="ONLINE"),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
)
