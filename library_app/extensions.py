"""Shared extension instances.

Created without an app so that modules can import them without circular
imports; ``create_app`` wires them up.
"""
from apscheduler.schedulers.background import BackgroundScheduler

# Background scheduler for housekeeping jobs (see scheduled_tasks.py)
scheduler: BackgroundScheduler = BackgroundScheduler(daemon=True)
