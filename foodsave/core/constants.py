"""
Centralized constants for the meal expiry check.

Change windows, type tags or job ids here instead of scattering literals across services and routes.
Windows can be overridden per deployment through Settings (see foodsave.config).
"""

# Meal lifecycle (meals.status). Other values exist; this job only reads/writes these two.
MEAL_STATUS_AVAILABLE = "available"
MEAL_STATUS_EXPIRED = "expired"

# Notification type tags owned by this job (notifications.type)
NOTIFICATION_TYPE_MEAL_EXPIRED = "meal_expired"
NOTIFICATION_TYPE_MEAL_EXPIRING_SOON = "meal_expiring_soon"

# Expiring-soon alert: meals whose deadline falls within the next N hours
EXPIRING_SOON_HOURS = 2
# Dedup: skip a meal already alerted within the trailing N hours (job runs hourly, so > 1 run)
ALERT_SUPPRESSION_HOURS = 3
# Retention: read notifications older than this are deleted
NOTIFICATION_RETENTION_DAYS = 30

# Scheduler job id (must match the id used in main.py add_job)
MEAL_EXPIRY_JOB_ID = "meal_expiry_check"
EXPIRY_CHECK_INTERVAL_MINUTES = 60

# Store requests: bounded, fail instead of hanging the run
STORE_TIMEOUT_SECONDS = 30.0
# PostgREST rows per GET; must not exceed the server max-rows (Supabase default 1000)
STORE_PAGE_SIZE = 1000

# Run summary status values
RUN_STATUS_SUCCESS = "success"
RUN_STATUS_PARTIAL = "partial"

SUCCESS_MESSAGE = "Meal expiry check completed successfully"
