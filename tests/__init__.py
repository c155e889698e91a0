"""
Test suite for the Clinic Appointment Scheduling service.

Contains unit tests for the scheduling core and API tests for its routes.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
