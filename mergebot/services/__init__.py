"""Merge pipeline: checks, approvals, merge method, commit message, executor."""
