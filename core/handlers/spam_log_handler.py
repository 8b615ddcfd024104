"""Handler for SpamDiscarded events: keep a record for rule tuning."""

from typing import Callable

from core.events import SpamDiscarded


def handle_spam_discarded(spam_log_service) -> Callable:
    """Factory for a handler that writes discarded submissions to spam_logs."""

    def handler(event: SpamDiscarded):
        submission = event.submission
        verdict = event.verdict
        spam_log_service.record(
            name=submission.name,
            email=submission.email,
            phone=submission.phone,
            message=submission.message,
            score=verdict.score,
            reason=event.reason,
            rules_version=verdict.rules_version,
            ip_address=event.ip_address,
        )

    return handler
