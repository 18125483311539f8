# -*- coding: utf-8 -*-
import contextlib
import logging

from django.db import DatabaseError, transaction

logger = logging.getLogger(__name__)


class StorageUnavailable(Exception):
    """
    A fetch or write failed inside a batch. Nothing from the batch was
    committed; the caller may retry the whole operation.
    """


@contextlib.contextmanager
def write_batch(medication=None):
    """
    Run a block as one atomic batch of inserts and deletes.

    When `medication` is given its row is locked for the duration of the
    batch on backends that support row locks, so two batches for the same
    medication do not interleave.
    :param medication: an optional saved Medication instance to lock.
    :raises StorageUnavailable: if the database raised during the batch.
    """
    try:
        with transaction.atomic():
            if medication is not None and medication.pk is not None:
                type(medication).objects.select_for_update().filter(
                    pk=medication.pk
                ).first()
            yield
    except DatabaseError as e:
        logger.error("Write batch failed: %s", e)
        raise StorageUnavailable(str(e)) from e
