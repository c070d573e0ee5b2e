"""
Dental Clinic Appointment API

A FastAPI backend for a dental clinic: user accounts with role-based access
control, the appointment lifecycle, and SMS notifications to patients.
"""

__version__ = "1.0.0"
