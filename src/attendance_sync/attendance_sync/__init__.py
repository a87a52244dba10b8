"""Attendance Sync package.

This package is organized by feature modules (devices, records, forwarding, sync)
with a thin Flask controller layer over plain service classes.
"""
