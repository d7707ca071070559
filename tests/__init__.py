"""
Test suite for the MedBook Appointment Service.

Contains unit and integration tests for identity, tokens and the appointment ledger.
"""
