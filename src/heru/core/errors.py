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

"""Exception hierarchy for the translation core.

All errors raised by the pipeline derive from :class:`HeruError`. Errors that
describe a rejected output carry structured :class:`~heru.core.models.Issue`
reasons so adapters can surface them without parsing messages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from heru.core.models import Issue


class HeruError(Exception):
    """Base exception for translation core errors."""

    pass


class AnalysisError(HeruError):
    """Input text could not be analyzed for the declared language.

    Raised when a segment contains letters of a script that is not supported
    for the language it was declared in.
    """

    def __init__(
        self,
        message: str,
        language: str | None = None,
        span: tuple[int, int] | None = None,
    ) -> None:
        super().__init__(message)
        self.language = language
        self.span = span


class UnsupportedLanguagePair(HeruError):
    """The requested source/target pair is not Hebrew<->Russian."""

    def __init__(self, source_lang: str, target_lang: str) -> None:
        super().__init__(
            f"Unsupported language pair: {source_lang} -> {target_lang} "
            "(supported: he -> ru, ru -> he)"
        )
        self.source_lang = source_lang
        self.target_lang = target_lang


class NoCandidateError(HeruError):
    """Generation produced no candidate translation for a segment."""

    pass


class QualityReject(HeruError):
    """Output was rejected by the quality gate.

    The rejected output is suppressed; ``reasons`` lists every issue found.
    """

    def __init__(self, reasons: list[Issue]) -> None:
        kinds = ", ".join(sorted({issue.kind.value for issue in reasons})) or "unknown"
        super().__init__(f"Translation rejected by quality gate: {kinds}")
        self.reasons = reasons


class ModelLoadError(HeruError):
    """A persisted snapshot could not be loaded."""

    pass


class RequestCancelled(HeruError):
    """Translation request was cancelled between pipeline stages."""

    pass


class UnknownTermWarning(UserWarning):
    """Technical-looking token left untranslated; degrades output to Flag."""

    pass
