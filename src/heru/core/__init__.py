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

"""Core data models, errors, snapshots and the translation engine."""

from heru.core.errors import (
    AnalysisError,
    HeruError,
    ModelLoadError,
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
    Outcome,
    PartOfSpeech,
    QualityVerdict,
    RankingModel,
    Segment,
    TermEntry,
    TermMatch,
    Token,
    TranslationResult,
)

__all__ = [
    "AnalysisError",
    "Candidate",
    "FeedbackRecord",
    "HeruError",
    "Issue",
    "IssueKind",
    "Language",
    "ModelLoadError",
    "NoCandidateError",
    "Outcome",
    "PartOfSpeech",
    "QualityReject",
    "QualityVerdict",
    "RankingModel",
    "RequestCancelled",
    "Segment",
    "TermEntry",
    "TermMatch",
    "Token",
    "TranslationResult",
    "UnknownTermWarning",
    "UnsupportedLanguagePair",
]
