"""
Test suite for the Clinic Workflow API.

Contains unit tests for tokens, role checks and the appointment state
machine, and API tests run against a SQLite database.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
