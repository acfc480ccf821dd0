"""
Spam Detection Service Module.

Orchestrates the heuristic spam detector: runs the signal extractors
concurrently, aggregates their sub-scores into a verdict and records an
automated report when the verdict warrants one.

Key Responsibilities:
- Running each extractor behind a fail-open guard with its own timeout.
- Persisting automated reports and linking them to earlier reports on the same content.
- Never letting a detection failure break the request that triggered it.
"""

import asyncio
import logging
import numbers
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, NamedTuple

from anyio import to_thread
from sqlmodel import Session, select

from app.core import spam_rules
from app.core.config import get_settings
from app.core.telemetry import record_detection_metric
from app.exceptions import DetectionError
from app.models.detection import DetectionResult
from app.models.enums import ContentType, ReportCategory, ReportType, Severity
from app.models.report import SpamReport
from app.services import spam_signals
from app.services.spam_report import add_related_report
from app.services.spam_scoring import aggregate

logger = logging.getLogger(__name__)


class SignalResult(NamedTuple):
    name: str
    value: float
    error: str | None = None


def severity_for_score(score: float) -> Severity:
    if score >= 0.8:
        return Severity.HIGH
    if score >= 0.6:
        return Severity.MEDIUM
    return Severity.LOW


class SpamDetectionService:
    """
    Service layer for scoring user-submitted content.

    Attributes:
        settings (Settings): Global application configuration.
        timeout (float): Per-extractor timeout in seconds.
    """

    def __init__(self, timeout: float | None = None):
        """
        Initializes the detection service.

        Args:
            timeout (float | None): Per-extractor timeout; defaults to SPAM_EXTRACTOR_TIMEOUT_SECONDS.
        """
        self.settings = get_settings()
        self.timeout = (
            timeout
            if timeout is not None
            else self.settings.SPAM_EXTRACTOR_TIMEOUT_SECONDS
        )

    async def _guard(self, name: str, extractor: Awaitable[Any]) -> SignalResult:
        """
        Await one extractor, degrading it to 0 on error, timeout or a non-numeric value.

        Args:
            name (str): Sub-score name, used for logging.
            extractor (Awaitable): The pending extractor call.

        Returns:
            SignalResult: The sub-score and, when degraded, the reason.
        """
        try:
            value = await asyncio.wait_for(extractor, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Spam signal '{name}' timed out after {self.timeout}s")
            return SignalResult(name, 0.0, "timeout")
        except Exception as e:
            # One failing signal must not block the submission
            logger.error(f"Spam signal '{name}' failed: {e}")
            return SignalResult(name, 0.0, str(e))

        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            logger.warning(f"Spam signal '{name}' returned non-numeric value {value!r}")
            return SignalResult(name, 0.0, "non-numeric")
        return SignalResult(name, max(0.0, min(1.0, float(value))))

    async def _keyword(self, content: Any) -> float:
        return spam_signals.keyword_score(content)

    async def _pattern(self, content: Any) -> float:
        return spam_signals.pattern_score(content)

    async def _off_loop(
        self, db: Session, extractor: Callable[..., float], *args: Any
    ) -> float:
        """
        Run a blocking extractor in a worker thread with its own read session.

        The thread is abandoned when the guard times out, so it must never
        touch the request session.
        """
        bind = db.get_bind()

        def read() -> float:
            with Session(bind) as reader:
                return extractor(reader, *args)

        return await to_thread.run_sync(read, abandon_on_cancel=True)

    async def _user(self, db: Session, user_id: int) -> float:
        return await self._off_loop(db, spam_signals.user_score, user_id)

    async def _frequency(
        self, db: Session, user_id: int, content_type: ContentType | str
    ) -> float:
        return await self._off_loop(
            db, spam_signals.frequency_score, user_id, content_type
        )

    async def analyze(
        self,
        db: Session,
        content: Any,
        content_type: ContentType | str,
        user_id: int,
    ) -> DetectionResult:
        """
        Score a submission without persisting anything.

        Args:
            db (Session): Database session, used for reads only.
            content (Any): Submission payload (usually a mapping of field -> value).
            content_type (ContentType | str): Kind of content being submitted.
            user_id (int): Author of the submission.

        Returns:
            DetectionResult: Aggregated verdict.
        """
        signals = await asyncio.gather(
            self._guard("keyword_score", self._keyword(content)),
            self._guard("pattern_score", self._pattern(content)),
            self._guard("user_score", self._user(db, user_id)),
            self._guard(
                "frequency_score", self._frequency(db, user_id, content_type)
            ),
        )
        scores = {signal.name: signal.value for signal in signals}
        try:
            result = aggregate(scores, self.settings.SPAM_THRESHOLD)
        except Exception as e:
            raise DetectionError(f"Could not aggregate spam scores: {e}") from e

        record_detection_metric(result.risk_level.value, result.is_spam)
        return result

    def should_record(self, result: DetectionResult) -> bool:
        return (
            result.is_spam
            or result.confidence > self.settings.DETECTION_LOG_MIN_CONFIDENCE
        )

    def record_detection(
        self,
        db: Session,
        content_type: ContentType | str,
        content_id: int | None,
        user_id: int,
        result: DetectionResult,
        force: bool = False,
        snapshot: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> SpamReport | None:
        """
        Persist an automated report for a verdict.

        A report is written only when the verdict is spam, its confidence is
        above DETECTION_LOG_MIN_CONFIDENCE, or `force` is set. The new report
        is cross-linked with earlier reports on the same content.

        Args:
            db (Session): Database session.
            content_type (ContentType | str): Kind of content.
            content_id (int | None): Content primary key; None when the content was refused before persistence.
            user_id (int): Author of the content.
            result (DetectionResult): Verdict to embed.
            force (bool): Record regardless of the verdict.
            snapshot (dict | None): Copy of the refused payload, kept in report metadata.
            metadata (dict | None): Extra request metadata (ip address, user agent).

        Returns:
            SpamReport | None: The persisted report, or None when nothing was written or persistence failed.
        """
        if not force and not self.should_record(result):
            return None

        report_metadata: dict[str, Any] = {
            "detection_version": spam_rules.DETECTION_VERSION,
            **(metadata or {}),
        }
        if snapshot is not None:
            report_metadata["content_snapshot"] = snapshot

        try:
            related_ids: list[int] = []
            if content_id is not None:
                related_ids = list(
                    db.exec(
                        select(SpamReport.id_report).where(
                            SpamReport.content_type == ContentType(content_type),
                            SpamReport.content_id == content_id,
                        )
                    ).all()
                )

            report = SpamReport(
                content_type=ContentType(content_type),
                content_id=content_id,
                id_user_reported=user_id,
                report_type=ReportType.AUTOMATED,
                category=ReportCategory.SPAM,
                severity=severity_for_score(result.overall_score),
                detection_result=result.model_dump(mode="json"),
                related_reports=related_ids,
                report_metadata=report_metadata,
                reported_at=datetime.now(),
            )
            db.add(report)
            db.flush()

            for related_id in related_ids:
                related = db.get(SpamReport, related_id)
                if related is not None:
                    add_related_report(db, related, report.id_report)  # type: ignore[arg-type]

            db.commit()
            db.refresh(report)
            logger.info(
                f"Automated spam report {report.id_report} for {report.content_type.value}:{content_id} "
                f"(confidence {result.confidence}%)"
            )
            return report
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to record spam detection: {e}")
            return None

    async def detect_spam(
        self,
        db: Session,
        content: Any,
        content_type: ContentType | str,
        user_id: int,
        content_id: int | None = None,
    ) -> DetectionResult:
        """
        Analyze a submission and record the verdict when warranted.

        Never raises: any internal failure yields a clean verdict and is logged.

        Returns:
            DetectionResult: The verdict, or DetectionResult.clean() on failure.
        """
        try:
            result = await self.analyze(db, content, content_type, user_id)
            await to_thread.run_sync(
                self.record_detection, db, content_type, content_id, user_id, result
            )
            return result
        except Exception as e:
            logger.error(f"Spam detection failed for user {user_id}: {e}")
            return DetectionResult.clean()
