"""
Meal expiry check: expire meals past their deadline, notify merchants, purge old read notifications.
- run_meal_expiry_check: one full pass (job.py).
- Stages: scan.py (scanner, transitioner), notify.py (expired + expiring-soon with dedup), cleanup.py (retention).
"""
from foodsave.core.policy import ExpiryPolicy
from foodsave.services.expiry.job import run_meal_expiry_check
from foodsave.services.expiry.types import RunSummary

__all__ = ["run_meal_expiry_check", "ExpiryPolicy", "RunSummary"]
