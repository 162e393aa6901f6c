from datetime import datetime, timedelta, timezone as dt_timezone

from django.test import SimpleTestCase

from workflow.services import audit_trail

AT = datetime(2025, 10, 4, 12, 30, 15, 123456, tzinfo=dt_timezone.utc)


class AuditTrailFormatTests(SimpleTestCase):
    def test_entry_without_reason(self):
        self.assertEqual(
            audit_trail.format_entry("DRAFT", "SUBMITTED", "mod@example.com", None, AT),
            "[2025-10-04T12:30:15.123Z] Status changed from DRAFT to SUBMITTED by mod@example.com",
        )

    def test_entry_with_reason(self):
        entry = audit_trail.format_entry("SUBMITTED", "REJECTED", "mod@example.com", "needs revision", AT)
        self.assertTrue(entry.endswith(" - Reason: needs revision"))

    def test_blank_reason_is_omitted(self):
        entry = audit_trail.format_entry("SUBMITTED", "APPROVED", "mod@example.com", "   ", AT)
        self.assertNotIn("Reason", entry)

    def test_timestamp_is_normalized_to_utc(self):
        sao_paulo = dt_timezone(timedelta(hours=-3))
        local = datetime(2025, 10, 4, 9, 30, 15, 123000, tzinfo=sao_paulo)
        self.assertEqual(audit_trail.format_timestamp(local), "2025-10-04T12:30:15.123Z")

    def test_update_entry(self):
        self.assertEqual(
            audit_trail.format_update_entry("Order", "admin@example.com", AT),
            "[2025-10-04T12:30:15.123Z] Order updated by admin@example.com",
        )


class AuditTrailAppendTests(SimpleTestCase):
    """
    GUARANTEES:
    - empty notes become exactly the entry
    - existing text is preserved byte for byte
    - N appends produce N lines in order
    """

    def test_append_to_empty(self):
        self.assertEqual(audit_trail.append("", "first"), "first")
        self.assertEqual(audit_trail.append(None, "first"), "first")

    def test_append_preserves_existing_text(self):
        existing = "Customer asked for matte lamination.\n  keep spacing  "
        result = audit_trail.append(existing, "entry")
        self.assertTrue(result.startswith(existing))
        self.assertEqual(result, existing + "\nentry")

    def test_n_appends_are_ordered(self):
        notes = ""
        entries = []
        for i in range(5):
            at = AT + timedelta(minutes=i)
            entry = audit_trail.format_entry(f"S{i}", f"S{i + 1}", "a@example.com", None, at)
            entries.append(entry)
            notes = audit_trail.append(notes, entry)

        self.assertEqual(notes.split("\n"), entries)
        self.assertEqual(sorted(entries), entries)
