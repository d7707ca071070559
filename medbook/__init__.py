"""
MedBook Appointment Service

A FastAPI-based service for booking paid appointments between patients and
doctors, with federated authentication across patients, doctors and admins.
"""

__version__ = "1.0.0"
