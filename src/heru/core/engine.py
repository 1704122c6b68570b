# Copyright 2025 HERU Contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Translation engine: the async entry point tying the pipeline together.

text -> analyzer -> term recognizer -> candidate generator -> ranker ->
quality gate -> TranslationResult, plus feedback submission and retraining.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
import warnings
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from heru.core.errors import (
    AnalysisError,
    HeruError,
    NoCandidateError,
    QualityReject,
    RequestCancelled,
    UnknownTermWarning,
    UnsupportedLanguagePair,
)
from heru.core.models import (
    Candidate,
    FeedbackRecord,
    Issue,
    IssueKind,
    Language,
    RankingModel,
    Segment,
    SegmentTranslation,
    TermEntry,
    TranslationResult,
)
from heru.core.observability import EventSink, LoggingEventSink, timed_stage
from heru.core.snapshot import Snapshot, SnapshotRegistry, SnapshotStore, default_snapshot
from heru.feedback.learner import Learner, Observation, RetrainReport
from heru.feedback.store import FeedbackStore
from heru.morphology.base import MorphologicalAnalyzer
from heru.morphology.detection import detect_language
from heru.morphology.hebrew import HebrewAnalyzer
from heru.morphology.russian import RussianAnalyzer
from heru.quality.gate import QualityGate
from heru.quality.metrics import FeedbackEvaluation, TranslationMetrics
from heru.ranking.ranker import Ranker
from heru.terminology.domains import detect_domain
from heru.terminology.recognizer import TermRecognizer
from heru.translation.dictionary import BilingualDictionary
from heru.translation.generator import CandidateGenerator
from heru.translation.transfer import Transfer, make_transfer
from heru.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class _SegmentResult:
    """Per-segment pipeline output: ranked candidates or the failure."""

    index: int
    span: tuple[int, int]
    source: str
    segment: Segment | None = None
    ranked: list[Candidate] = field(default_factory=list)
    flags: list[Issue] = field(default_factory=list)
    error: HeruError | None = None

    @property
    def passthrough(self) -> bool:
        return self.error is not None

    def text(self, rank: int = 0) -> str:
        if self.passthrough:
            return self.source
        return self.ranked[min(rank, len(self.ranked) - 1)].text


class TranslationEngine:
    """Hebrew<->Russian translation engine.

    Args:
        settings: Configuration (global settings if None)
        feedback_store: Feedback storage (private in-memory store if None)
        snapshot_store: Persistence for snapshots (in-memory only if None)
        event_sink: Receiver of stage events (logs them if None)

    Example:
        >>> engine = TranslationEngine()
        >>> result = await engine.translate("לחץ גבוה במערכת", "he", "ru")
        >>> result.translation
        'высокое давление в системе'
    """

    def __init__(
        self,
        settings: Settings | None = None,
        feedback_store: FeedbackStore | None = None,
        snapshot_store: SnapshotStore | None = None,
        event_sink: EventSink | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.snapshot_store = snapshot_store
        self.events: EventSink = event_sink or LoggingEventSink()

        initial = snapshot_store.load_latest() if snapshot_store is not None else None
        self.registry = SnapshotRegistry(initial or default_snapshot(self.settings))

        if feedback_store is None:
            feedback_store = FeedbackStore(":memory:")
        feedback_store.initialize()
        self.feedback_store = feedback_store

        self.analyzers: dict[Language, MorphologicalAnalyzer] = {
            Language.HEBREW: HebrewAnalyzer(),
            Language.RUSSIAN: RussianAnalyzer(),
        }
        self.dictionary = BilingualDictionary()
        self.transfers: dict[Language, Transfer] = {
            language: make_transfer(
                language, analyzer, self.analyzers[language.other], self.dictionary
            )
            for language, analyzer in self.analyzers.items()
        }
        self.ranker = Ranker()
        self.gate = QualityGate.from_settings(self.settings)
        self.learner = Learner.from_settings(self.settings)
        self.metrics = TranslationMetrics()
        self._retrain_lock = threading.Lock()
        self._started_at = datetime.now(timezone.utc)

        logger.info(f"Translation engine ready (snapshot v{self.snapshot.version})")

    @property
    def snapshot(self) -> Snapshot:
        return self.registry.current

    # ------------------------------------------------------------------
    # Translation
    # ------------------------------------------------------------------

    async def translate(
        self,
        text: str,
        source_lang: Language | str = "auto",
        target_lang: Language | str | None = None,
        domain: str = "auto",
        cancel_event: threading.Event | None = None,
    ) -> TranslationResult:
        """Translate a document.

        Args:
            text: Source text
            source_lang: ``he``, ``ru`` or ``auto``
            target_lang: The other language (default: opposite of the source)
            domain: Domain tag or ``auto``
            cancel_event: Set to cancel; checked between stages

        Returns:
            Translation with alternatives, flags and quality verdict

        Raises:
            UnsupportedLanguagePair: If the pair is not he->ru or ru->he
            AnalysisError: If no segment could be analyzed
            NoCandidateError: If nothing could be translated
            QualityReject: If the quality gate rejects the output
            RequestCancelled: If ``cancel_event`` was set
        """
        source, target = self._resolve_pair(text, source_lang, target_lang)
        domain = detect_domain(text) if domain == "auto" else domain
        request_id = uuid.uuid4().hex[:12]
        # one read; every segment of this request uses the same snapshot
        snapshot = self.registry.current

        analyzer = self.analyzers[source]
        spans = analyzer.split_segments(text)
        if not spans:
            raise NoCandidateError("Input contains no text to translate")

        logger.info(
            f"[{request_id}] Translating {len(spans)} segments {source.value}->{target.value} "
            f"(domain={domain}, snapshot v{snapshot.version})"
        )
        semaphore = asyncio.Semaphore(self.settings.max_workers)
        recognizer = TermRecognizer(snapshot.lexicon, self.settings.context_window)

        async def run(index: int, span: tuple[int, int]) -> _SegmentResult:
            async with semaphore:
                return await asyncio.to_thread(
                    self._translate_segment,
                    snapshot,
                    recognizer,
                    source,
                    domain,
                    text,
                    index,
                    span,
                    request_id,
                    cancel_event,
                )

        with timed_stage(self.events, "request", request_id):
            results = await asyncio.gather(
                *(run(index, span) for index, span in enumerate(spans)),
                return_exceptions=True,
            )
            segments = self._collect(results)
            self._check_cancelled(cancel_event)
            return self._assemble(text, source, target, domain, snapshot, segments, request_id)

    def _resolve_pair(
        self, text: str, source_lang: Language | str, target_lang: Language | str | None
    ) -> tuple[Language, Language]:
        try:
            source = None if source_lang == "auto" else Language.parse(source_lang)
            target = None if target_lang in (None, "auto") else Language.parse(target_lang)
        except ValueError as e:
            raise UnsupportedLanguagePair(str(source_lang), str(target_lang)) from e

        if source is not None and source is target:
            raise UnsupportedLanguagePair(source.value, source.value)
        if not text.strip():
            raise NoCandidateError("Input contains no text to translate")

        if source is None:
            detected = detect_language(text)
            if detected is None:
                if not any(char.isalpha() for char in text):
                    raise NoCandidateError("Input contains no words to translate")
                raise AnalysisError("Cannot detect source language")
            source = detected
            if source is target:
                raise UnsupportedLanguagePair(source.value, source.value)

        return source, target or source.other

    def _translate_segment(
        self,
        snapshot: Snapshot,
        recognizer: TermRecognizer,
        source: Language,
        domain: str,
        text: str,
        index: int,
        span: tuple[int, int],
        request_id: str,
        cancel_event: threading.Event | None,
    ) -> _SegmentResult:
        result = _SegmentResult(index=index, span=span, source=text[span[0] : span[1]])
        try:
            self._check_cancelled(cancel_event)
            with timed_stage(self.events, "analyze", request_id, index):
                segment = self.analyzers[source].analyze_segment(text, index=index, span=span)

            self._check_cancelled(cancel_event)
            with timed_stage(self.events, "recognize", request_id, index):
                segment = recognizer.recognize_segment(segment, domain)
            result.segment = segment

            self._check_cancelled(cancel_event)
            with timed_stage(self.events, "generate", request_id, index):
                generator = CandidateGenerator(
                    self.transfers[source], max_candidates=self.settings.max_candidates
                )
                candidates = list(
                    generator.generate(
                        segment,
                        fluency=snapshot.fluency_for(source.other),
                        memory=snapshot.memory,
                    )
                )

            self._check_cancelled(cancel_event)
            with timed_stage(self.events, "rank", request_id, index):
                result.ranked = self.ranker.rank(
                    candidates, snapshot.model, top_k=self.settings.top_k
                )

            with timed_stage(self.events, "validate", request_id, index):
                result.flags = [
                    issue
                    for issue in self.gate.check_segment(segment, result.ranked[0])
                    if not issue.kind.rejects
                ]
        except (AnalysisError, NoCandidateError) as e:
            logger.warning(f"[{request_id}] Segment {index} passed through: {e}")
            result.error = e
            result.ranked = []
        return result

    @staticmethod
    def _check_cancelled(cancel_event: threading.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise RequestCancelled("Translation request cancelled")

    @staticmethod
    def _collect(results: list[_SegmentResult | BaseException]) -> list[_SegmentResult]:
        segments: list[_SegmentResult] = []
        for result in results:
            if isinstance(result, BaseException):
                raise result
            segments.append(result)

        failures = [s.error for s in segments if s.error is not None]
        if failures and len(failures) == len(segments):
            if all(isinstance(error, AnalysisError) for error in failures):
                raise failures[0]
            raise NoCandidateError("No segment could be translated") from failures[0]
        return segments

    def _assemble(
        self,
        text: str,
        source: Language,
        target: Language,
        domain: str,
        snapshot: Snapshot,
        segments: list[_SegmentResult],
        request_id: str,
    ) -> TranslationResult:
        translation, offsets = self._join(text, segments, rank=0)

        flags: list[Issue] = []
        for result, offset in zip(segments, offsets):
            if result.passthrough:
                flags.append(
                    Issue(
                        kind=IssueKind.SEGMENT_PASSTHROUGH,
                        span=result.span,
                        segment_index=result.index,
                        detail=str(result.error),
                    )
                )
            for issue in result.flags:
                if issue.in_output:
                    start, end = issue.span
                    issue = issue.model_copy(update={"span": (start + offset, end + offset)})
                flags.append(issue)

        verdict = self.gate.validate_document(text, translation, target, flags)
        if verdict.rejected:
            raise QualityReject(list(verdict.reasons))

        unknown = [f for f in flags if f.kind is IssueKind.UNKNOWN_TERM_UNTRANSLATED]
        if unknown:
            warnings.warn(
                f"{len(unknown)} unknown terms left untranslated",
                UnknownTermWarning,
                stacklevel=3,
            )

        alternatives: list[str] = []
        for rank in range(1, self.settings.top_k):
            alternative, _ = self._join(text, segments, rank=rank)
            if alternative != translation and alternative not in alternatives:
                alternatives.append(alternative)

        return TranslationResult(
            request_id=request_id,
            source_lang=source,
            target_lang=target,
            domain=domain,
            translation=translation,
            alternatives=alternatives,
            flags=list(verdict.reasons),
            verdict=verdict,
            segments=[
                SegmentTranslation(
                    index=result.index,
                    source=result.source,
                    span=result.span,
                    translation=result.text(),
                    alternatives=[c.text for c in result.ranked[1:]],
                    passthrough=result.passthrough,
                    score=result.ranked[0].score if result.ranked else None,
                    applied_terms=list(result.ranked[0].applied_terms) if result.ranked else [],
                )
                for result in segments
            ],
            snapshot_version=snapshot.version,
        )

    @staticmethod
    def _join(text: str, segments: list[_SegmentResult], rank: int) -> tuple[str, list[int]]:
        """Assemble segment texts, keeping the source whitespace between them."""
        output = ""
        offsets: list[int] = []
        cursor = 0
        for result in segments:
            start, end = result.span
            output += text[cursor:start]
            offsets.append(len(output))
            output += result.text(rank)
            cursor = end
        output += text[cursor:]
        return output, offsets

    # ------------------------------------------------------------------
    # Feedback
    # ------------------------------------------------------------------

    def submit_feedback(
        self,
        original: str,
        output: str,
        correction: str | None = None,
        rating: int = 3,
        source_lang: Language | str | None = None,
        target_lang: Language | str | None = None,
        domain: str = "general",
    ) -> FeedbackRecord:
        """Queue feedback on a translation.

        Missing languages are detected from the original, then from the
        correction or output (the target side), and finally fall back to
        ``default_source_lang`` so a valid rating is never refused.

        Raises:
            ValueError: If the rating is outside 1..5 or a language code is unsupported
        """
        source, target = self._feedback_languages(
            original, output, correction, source_lang, target_lang
        )
        record = FeedbackRecord(
            original=original,
            output=output,
            correction=correction,
            rating=rating,
            source_lang=source,
            target_lang=target,
            domain=domain,
        )
        self.feedback_store.submit(record)
        return record

    def _feedback_languages(
        self,
        original: str,
        output: str,
        correction: str | None,
        source_lang: Language | str | None,
        target_lang: Language | str | None,
    ) -> tuple[Language, Language]:
        target = Language.parse(target_lang) if target_lang else None
        if source_lang:
            source = Language.parse(source_lang)
        elif target is not None:
            source = detect_language(original) or target.other
        else:
            source = detect_language(original)
            if source is None:
                detected = detect_language(correction or "") or detect_language(output)
                if detected is not None:
                    source = detected.other
                else:
                    source = Language.parse(self.settings.default_source_lang)
                logger.info(
                    f"Feedback original has no detectable language; assuming {source.value}"
                )
        return source, target or source.other

    def retrain(self) -> RetrainReport:
        """Learn from feedback stored since the last run and publish a new snapshot.

        Returns the current version unchanged when there is no new feedback.
        """
        with self._retrain_lock:
            store = self.feedback_store
            store.flush()
            base = self.registry.current
            records = store.records_since(store.watermark)
            if not records:
                logger.info("Retrain: no new feedback")
                return RetrainReport(
                    version=base.version, changed=False, weights=dict(base.model.weights)
                )

            observations = [self._observe(record, base) for record in records]
            snapshot = self.learner.learn(base, observations)
            self.registry.publish(snapshot)
            if self.snapshot_store is not None:
                self.snapshot_store.save(snapshot)
            store.set_watermark(records[-1].id or 0)
            store.set_last_retrain(datetime.now(timezone.utc))

            logger.info(f"Retrain: {len(records)} records -> snapshot v{snapshot.version}")
            return RetrainReport(
                version=snapshot.version,
                changed=True,
                records=len(records),
                weights=dict(snapshot.model.weights),
                unknown_terms=sorted({u for obs in observations for u in obs.unknown_terms}),
                evaluation=self._evaluate(observations),
            )

    def _evaluate(self, observations: list[Observation]) -> FeedbackEvaluation | None:
        """Score corrected outputs against their corrections, if any were corrected."""
        corrected = [obs for obs in observations if obs.record.correction]
        if not corrected:
            return None
        evaluation = self.metrics.evaluate_feedback(
            [obs.record.output for obs in corrected],
            [obs.record.correction or "" for obs in corrected],
            [
                ([term.target for term in obs.applied], set(obs.correction_lemmas))
                for obs in corrected
            ],
        )
        logger.info(
            f"Corrected outputs: BLEU {evaluation.scores.bleu:.1f}, "
            f"chrF {evaluation.scores.chrf:.1f}, TER {evaluation.scores.ter:.1f}"
        )
        return evaluation

    def maybe_retrain(self) -> RetrainReport | None:
        """Retrain if enough feedback is pending or the retrain interval elapsed."""
        pending = self.feedback_store.pending_count()
        if pending == 0:
            return None
        last = self.feedback_store.last_retrain or self._started_at
        elapsed = datetime.now(timezone.utc) - last
        interval = timedelta(seconds=self.settings.retrain_interval_seconds)
        if pending >= self.settings.retrain_batch_size or elapsed >= interval:
            return self.retrain()
        return None

    def _observe(self, record: FeedbackRecord, snapshot: Snapshot) -> Observation:
        """Re-run the pipeline on a feedback record to recover what the learner needs."""
        features: dict[str, float] = {}
        applied = []
        contexts = []
        unknown: list[str] = []
        analyzer = self.analyzers[record.source_lang]
        recognizer = TermRecognizer(snapshot.lexicon, self.settings.context_window)
        generator = CandidateGenerator(
            self.transfers[record.source_lang], max_candidates=self.settings.max_candidates
        )

        chosen: list[Candidate] = []
        for index, span in enumerate(analyzer.split_segments(record.original)):
            try:
                segment = analyzer.analyze_segment(record.original, index=index, span=span)
                segment = recognizer.recognize_segment(segment, record.domain)
                ranked = self.ranker.rank(
                    generator.generate(
                        segment, fluency=snapshot.fluency_for(record.target_lang)
                    ),
                    snapshot.model,
                )
            except (AnalysisError, NoCandidateError) as e:
                logger.debug(f"Feedback {record.id}: segment {index} skipped: {e}")
                continue
            candidate = next((c for c in ranked if c.text in record.output), ranked[0])
            chosen.append(candidate)
            unknown.extend(u.surface for u in segment.unknown_terms)
            for term in candidate.applied_terms:
                applied.append(term)
                contexts.append(
                    frozenset(
                        segment.context_lemmas(
                            term.token_start, term.token_end, self.settings.context_window
                        )
                    )
                )

        if chosen:
            names = {name for candidate in chosen for name in candidate.features}
            features = {
                name: sum(c.features.get(name, 0.0) for c in chosen) / len(chosen)
                for name in sorted(names)
            }

        return Observation(
            record=record,
            features=features,
            applied=tuple(applied),
            contexts=tuple(contexts),
            correction_lemmas=self._lemmas(record.correction, record.target_lang),
            unknown_terms=tuple(unknown),
        )

    def _lemmas(self, text: str | None, language: Language) -> tuple[str, ...]:
        if not text:
            return ()
        try:
            return tuple(
                token.lemma
                for segment in self.analyzers[language].analyze(text)
                for token in segment.tokens
                if token.is_word
            )
        except AnalysisError as e:
            logger.debug(f"Correction does not analyze as {language.value}: {e}")
            return ()

    def import_terms(self, entries: Iterable[TermEntry]) -> Snapshot:
        """Publish a snapshot whose lexicon adds or replaces ``entries``."""
        with self._retrain_lock:
            base = self.registry.current
            version = base.version + 1
            snapshot = base.evolve(
                version=version,
                lexicon=base.lexicon.with_entries(entries, version),
                model=RankingModel(version=version, weights=base.model.weights),
            )
            self.registry.publish(snapshot)
            if self.snapshot_store is not None:
                self.snapshot_store.save(snapshot)
            return snapshot

    def close(self) -> None:
        self.feedback_store.flush()
        self.feedback_store.cleanup()
