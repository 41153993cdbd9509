"""Reservations app package.

Vehicle reservations with optional equipment and activity lines: the
availability and overlap checks, the transactional create flow, status
transitions for checkout, return and cancellation, and the staff fleet
calendar.
"""
