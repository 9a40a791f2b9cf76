"""Article corpus readers."""

from riseup.infrastructure.corpus.file_reader import JsonFileCorpusReader
from riseup.infrastructure.corpus.http_reader import HttpCorpusReader
from riseup.infrastructure.corpus.parsing import parse_articles

__all__ = ["HttpCorpusReader", "JsonFileCorpusReader", "parse_articles"]
