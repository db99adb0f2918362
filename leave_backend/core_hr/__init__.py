"""Core HR module — the Employee record the leave rules key on."""

from leave_backend.core_hr.models import Employee

__all__ = ["Employee"]
