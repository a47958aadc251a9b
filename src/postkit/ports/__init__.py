from .reader import CorpusReader
from .renderer import MarkdownRenderer
from .rule import CorpusRule, LintRule

__all__ = [
    "CorpusReader",
    "CorpusRule",
    "LintRule",
    "MarkdownRenderer",
]
