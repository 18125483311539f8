# -*- coding: utf-8 -*-
from django.db import transaction
from django.dispatch import Signal

# Sent after a batch that inserted, updated or removed IntakeLog rows commits.
intake_logs_changed = Signal()

# Sent after a batch that inserted or removed Intake rows for a medication
# commits. Receivers get `medication`.
schedule_changed = Signal()


def send_on_commit(signal, sender, **kwargs):
    """
    Defer `signal` until the surrounding transaction commits, so receivers
    (notifications, view refreshes) never observe a rolled back batch.
    """
    transaction.on_commit(lambda: signal.send(sender=sender, **kwargs))
