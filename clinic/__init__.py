"""
Clinic Workflow API

A FastAPI-based backend for a clinic: patient and doctor accounts,
appointment booking against doctors' weekly time slots, and diagnosis
records, with bearer-token authentication and role-based access control.
"""

__version__ = "1.0.0"
