from carrental.tasks.celery_app import celery
from carrental.tasks import worker_jobs

@celery.task(name="carrental.tasks.jobs.expire_pending_bookings")
def expire_pending_bookings():
    return worker_jobs.expire_pending_bookings()


@celery.task(name="carrental.tasks.jobs.process_notification_queue")
def process_notification_queue(limit: int = 50):
    return worker_jobs.process_notification_queue(limit=limit)
