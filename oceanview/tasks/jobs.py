from oceanview.tasks.celery_app import celery
from oceanview.tasks import worker_jobs


@celery.task(name="oceanview.tasks.jobs.send_departure_reminders")
def send_departure_reminders():
    return worker_jobs.send_departure_reminders()
