"""
Celery configuration for the conversion worker.

Loaded by `celery_app.config_from_object("celeryconfig")` in docconvert/tasks/__init__.py.
All broker/result-backend URLs come from environment variables,
defaulting to localhost for local dev.
"""

import os

# ═══════════════════════════════════════════════════════════
#  Broker & Result Backend
# ═══════════════════════════════════════════════════════════

broker_url = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
result_backend = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/1")

# ═══════════════════════════════════════════════════════════
#  Serialization: JSON only
# ═══════════════════════════════════════════════════════════

task_serializer = "json"
result_serializer = "json"
accept_content = ["json"]

# ═══════════════════════════════════════════════════════════
#  Timezone
# ═══════════════════════════════════════════════════════════

timezone = "UTC"
enable_utc = True

# ═══════════════════════════════════════════════════════════
#  Task Execution
# ═══════════════════════════════════════════════════════════

# Ack after the task body ran; a failed conversion is still acked
# (no redelivery), a worker crash is not
task_acks_late = True
task_reject_on_worker_lost = True

# One conversion at a time per worker process: soffice is CPU-heavy
worker_prefetch_multiplier = 1

task_soft_time_limit = 600    # 10 min: raises SoftTimeLimitExceeded
task_time_limit = 660         # 11 min: hard kill

# ═══════════════════════════════════════════════════════════
#  Result Expiry: 24h
# ═══════════════════════════════════════════════════════════

result_expires = 86400

# ═══════════════════════════════════════════════════════════
#  Worker Settings
# ═══════════════════════════════════════════════════════════

worker_max_tasks_per_child = 50

worker_send_task_events = False
task_send_sent_event = False

# ═══════════════════════════════════════════════════════════
#  Task Routes
# ═══════════════════════════════════════════════════════════
# Run a dedicated worker:
#   celery -A docconvert.tasks worker -Q conversions

task_routes = {
    "docconvert.tasks.conversion_tasks.*": {"queue": "conversions"},
}

task_default_queue = "default"
