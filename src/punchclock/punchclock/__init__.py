"""Punchclock package.

Time-and-attendance verification engine organized by feature modules
(offices, trust, attendance, reports, qr, corrections) with a thin Flask
controller layer and service/repository layers underneath.
"""
