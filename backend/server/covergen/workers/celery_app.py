"""
Celery application configuration for generation work dispatch
"""
from celery import Celery
from celery.signals import worker_init
from kombu import Queue, Exchange
from covergen.core.config import settings
from covergen.core.logging import configure_logging

GENERATION_QUEUE = "generation"

celery_app = Celery(
    "covergen_worker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[
        "covergen.workers.generation",
    ]
)

# Define exchanges
main_exchange = Exchange("main", type="direct", durable=True)

task_queues = [
    Queue(
        GENERATION_QUEUE,
        main_exchange,
        routing_key=GENERATION_QUEUE,
    ),
]

# Configure Celery
celery_app.conf.update(
    # Serialization
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    # Timezone
    timezone="UTC",
    enable_utc=True,

    # Task execution
    task_track_started=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,

    # Jobs are never retried; a failed job is restarted explicitly by its owner
    task_max_retries=0,

    # Queue configuration
    task_queues=task_queues,
    task_default_queue=GENERATION_QUEUE,
    task_default_exchange="main",
    task_default_exchange_type="direct",
    task_default_routing_key=GENERATION_QUEUE,

    # Task routing
    task_routes={
        "covergen.workers.generation.run_generation_job": {
            "queue": GENERATION_QUEUE,
            "routing_key": GENERATION_QUEUE
        },
    },

    # Result backend configuration
    result_expires=3600,  # 1 hour

    # Monitoring
    worker_hijack_root_logger=False,
    worker_log_format="[%(asctime)s: %(levelname)s/%(processName)s] %(message)s",
    worker_task_log_format="[%(asctime)s: %(levelname)s/%(processName)s][%(task_name)s(%(task_id)s)] %(message)s",
)


@worker_init.connect
def setup_worker_logging(**kwargs):
    configure_logging()
