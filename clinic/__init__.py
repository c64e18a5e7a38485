"""
Clinic Management System

A FastAPI-based service for a small clinic: staff authentication with
role-based access (admin, reception, clinician), patient records and
appointment scheduling with per-clinician conflict detection.
"""

__version__ = "1.0.0"
