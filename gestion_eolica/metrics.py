"""Prometheus metrics for the rental and installment flows."""

from __future__ import annotations

from prometheus_client import Counter

equipment_assignments_total = Counter(
    "equipment_assignments_total",
    "Total number of successful equipment assignments.",
    ["mode"],
)
equipment_unassignments_total = Counter(
    "equipment_unassignments_total",
    "Total number of equipment unassignments.",
)
installment_plans_total = Counter(
    "installment_plans_total",
    "Total number of installment plans generated.",
    ["concept"],
)
installments_paid_total = Counter(
    "installments_paid_total",
    "Total number of installments marked as paid.",
)
login_attempts_total = Counter(
    "login_attempts_total",
    "Login attempts by result.",
    ["result"],
)


__all__ = [
    "equipment_assignments_total",
    "equipment_unassignments_total",
    "installment_plans_total",
    "installments_paid_total",
    "login_attempts_total",
]
