"""Scheduling and recurring-job engine for restoration crews."""
