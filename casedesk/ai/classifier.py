"""
Content-type classifier.

Maps a free-form task hint (the label of an uploaded file, an evidence type,
a MIME type or explicit flags) to a ContentCategory. Rules are evaluated in
order and the first match wins; anything unmatched is plain text.
"""
import re
import unicodedata
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from .interfaces import ContentCategory


@dataclass
class TaskDescriptor:
    """What the classifier looks at."""
    hint: str = ""
    mime_type: Optional[str] = None
    has_images: bool = False
    has_text: bool = False


@dataclass
class ClassificationRule:
    """A single classification rule. ``keywords`` match at the start of a word of the hint."""
    category: ContentCategory
    keywords: Tuple[str, ...] = ()
    mime_prefixes: Tuple[str, ...] = ()
    predicate: Optional[Callable[[TaskDescriptor], bool]] = field(default=None, repr=False)

    def matches(self, task: TaskDescriptor, normalized_hint: str) -> bool:
        if self.predicate is not None and self.predicate(task):
            return True

        mime = (task.mime_type or "").lower()
        if mime and any(mime.startswith(prefix) for prefix in self.mime_prefixes):
            return True

        return any(
            re.search(rf"\b{re.escape(_normalize(keyword))}", normalized_hint)
            for keyword in self.keywords
        )


def _normalize(text: str) -> str:
    """Lowercase and strip accents so 'Vídeo' and 'video' compare equal."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


DEFAULT_RULES: List[ClassificationRule] = [
    ClassificationRule(
        ContentCategory.MIXED,
        keywords=("misto", "mista", "mixed", "multimodal"),
        predicate=lambda task: task.has_images and task.has_text,
    ),
    ClassificationRule(
        ContentCategory.VIDEO,
        keywords=("vídeo", "video", "gravação de tela", "screen recording"),
        mime_prefixes=("video/",),
    ),
    ClassificationRule(
        ContentCategory.AUDIO,
        keywords=("áudio", "audio", "voz", "voice", "chamada", "call", "ligação"),
        mime_prefixes=("audio/",),
    ),
    ClassificationRule(
        ContentCategory.IMAGE,
        keywords=("imagem", "image", "screenshot", "print", "foto", "photo"),
        mime_prefixes=("image/",),
        predicate=lambda task: task.has_images,
    ),
]


class ContentClassifier:
    """Prioritized rule list; insert rules to add categories without touching callers."""

    def __init__(self, rules: Optional[List[ClassificationRule]] = None,
                 default: ContentCategory = ContentCategory.TEXT):
        self.rules = list(rules if rules is not None else DEFAULT_RULES)
        self.default = default

    def add_rule(self, rule: ClassificationRule, index: Optional[int] = None) -> None:
        if index is None:
            self.rules.append(rule)
        else:
            self.rules.insert(index, rule)

    def classify(self, task: TaskDescriptor) -> ContentCategory:
        normalized_hint = _normalize(task.hint or "")
        for rule in self.rules:
            if rule.matches(task, normalized_hint):
                return rule.category
        return self.default


_default_classifier = ContentClassifier()


def classify(
    hint: str = "",
    *,
    mime_type: Optional[str] = None,
    has_images: bool = False,
    has_text: bool = False
) -> ContentCategory:
    """Classify a task hint with the default rule list."""
    return _default_classifier.classify(
        TaskDescriptor(hint=hint, mime_type=mime_type, has_images=has_images, has_text=has_text)
    )
