"""
Tests for ``core.domain.transactions``.
"""

from __future__ import annotations

from django.db import IntegrityError
from django.test import TestCase

from accounts.models import User
from core.domain.exceptions import Conflict, NotFound
from core.domain.transactions import lock_for_update, run_with_retry


class TestRunWithRetry(TestCase):

    def test_returns_first_successful_result(self):
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise IntegrityError("duplicate key")
            return "ok"

        with self.assertLogs("core.domain.transactions", level="WARNING"):
            result = run_with_retry(flaky, attempts=3, conflict_message="busy")

        self.assertEqual(result, "ok")
        self.assertEqual(len(calls), 2)

    def test_exhausted_attempts_raise_conflict(self):
        def always_fails():
            raise IntegrityError("duplicate key")

        with self.assertLogs("core.domain.transactions", level="WARNING") as logs:
            with self.assertRaises(Conflict) as ctx:
                run_with_retry(always_fails, attempts=2, conflict_message="busy")

        self.assertEqual(str(ctx.exception), "busy")
        self.assertIsInstance(ctx.exception.__cause__, IntegrityError)
        self.assertEqual(len(logs.records), 2)
        self.assertIn("attempt 2/2", logs.output[-1])

    def test_non_positive_attempts_still_try_once(self):
        calls = []

        def always_fails():
            calls.append(1)
            raise IntegrityError("duplicate key")

        with self.assertLogs("core.domain.transactions", level="WARNING") as logs:
            with self.assertRaises(Conflict):
                run_with_retry(always_fails, attempts=0, conflict_message="busy")

        self.assertEqual(len(calls), 1)
        self.assertIn("attempt 1/1", logs.output[0])

    def test_domain_errors_are_not_retried(self):
        calls = []

        def missing():
            calls.append(1)
            raise NotFound("gone")

        with self.assertRaises(NotFound):
            run_with_retry(missing, attempts=3, conflict_message="busy")
        self.assertEqual(len(calls), 1)


class TestLockForUpdate(TestCase):

    def test_missing_row_raises_not_found(self):
        with self.assertRaises(NotFound):
            lock_for_update(User, 424242)
