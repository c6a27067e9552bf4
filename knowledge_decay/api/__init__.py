"""
Public schemas for decay verdicts and audit records.
"""
