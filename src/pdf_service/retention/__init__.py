"""Retention sweep: deletes staged originals and converted PDFs past the retention window."""

from .scheduler import RetentionScheduler
from .sweeper import EntryOutcome, RetentionSweeper, SweepReport
