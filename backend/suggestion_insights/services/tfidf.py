"""TF-IDF vectorization over normalized suggestion documents.

Weights are computed in two passes over a document-term count matrix:

1. tf(term, doc) = count(term in doc) / total terms in doc
2. idf(term) = ln(N / counts(term)), weight = tf * idf

``counts`` comes from a pluggable :data:`TermCountingPolicy`. The default,
:func:`corpus_occurrences`, counts every occurrence of a term across the corpus
rather than the number of documents containing it. That differs from textbook
TF-IDF and can make idf negative for terms that repeat heavily; it is kept as
the default so cluster output stays stable. :func:`document_frequency` is the
textbook alternative.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import numpy as np
from sklearn.feature_extraction.text import CountVectorizer

logger = logging.getLogger(__name__)

TermVector = dict[str, float]


@dataclass(frozen=True)
class NormalizedDocument:
    """Token sequence of one suggestion."""
    source_id: str
    tokens: tuple[str, ...] = field(default_factory=tuple)

    @property
    def token_count(self) -> int:
        return len(self.tokens)


# Maps a (documents x terms) count matrix to one count per term
TermCountingPolicy = Callable[[np.ndarray], np.ndarray]


def corpus_occurrences(counts: np.ndarray) -> np.ndarray:
    """Count every occurrence of each term across all documents."""
    return counts.sum(axis=0)


def document_frequency(counts: np.ndarray) -> np.ndarray:
    """Count the number of documents containing each term."""
    return (counts > 0).sum(axis=0)


def _tokens_as_is(tokens: Sequence[str]) -> list[str]:
    # Documents arrive already normalized
    return list(tokens)


@dataclass(frozen=True)
class TermMatrix:
    """Dense document-term matrices sharing one vocabulary.

    Attributes:
        counts: Raw term counts, one row per document
        weights: TF-IDF weights, same shape as ``counts``
        terms: Vocabulary, one entry per column
    """
    counts: np.ndarray
    weights: np.ndarray
    terms: list[str]

    def __len__(self) -> int:
        return self.weights.shape[0]

    def term_vector(self, index: int) -> TermVector:
        """Sparse view of one row: every term present in the document."""
        return {
            self.terms[j]: float(self.weights[index, j])
            for j in np.flatnonzero(self.counts[index])
        }

    @classmethod
    def from_vectors(cls, vectors: Sequence[TermVector]) -> "TermMatrix":
        """Build a matrix from precomputed sparse term vectors."""
        terms = sorted({term for vector in vectors for term in vector})
        columns = {term: j for j, term in enumerate(terms)}

        counts = np.zeros((len(vectors), len(terms)), dtype=np.int64)
        weights = np.zeros((len(vectors), len(terms)), dtype=np.float64)
        for i, vector in enumerate(vectors):
            for term, weight in vector.items():
                counts[i, columns[term]] = 1
                weights[i, columns[term]] = weight

        return cls(counts=counts, weights=weights, terms=terms)


def count_terms(docs: Sequence[NormalizedDocument]) -> tuple[np.ndarray, list[str]]:
    """Document-term count matrix and its vocabulary.

    A corpus without any tokens yields a matrix with zero columns.
    """
    if not any(doc.tokens for doc in docs):
        return np.zeros((len(docs), 0), dtype=np.int64), []

    vectorizer = CountVectorizer(analyzer=_tokens_as_is, lowercase=False, token_pattern=None)
    counts = vectorizer.fit_transform([doc.tokens for doc in docs]).toarray()
    return counts, vectorizer.get_feature_names_out().tolist()


class TfidfVectorizer:
    """Builds one term-weight row per document."""

    def __init__(self, counting_policy: TermCountingPolicy = corpus_occurrences):
        self.counting_policy = counting_policy

    def vectorize(self, docs: Sequence[NormalizedDocument]) -> TermMatrix:
        """Vectorize a corpus.

        Args:
            docs: Normalized documents; row ``i`` of the result belongs to
                ``docs[i]``

        Returns:
            TermMatrix over the corpus vocabulary. Documents without tokens
            get an all-zero row.
        """
        counts, terms = count_terms(docs)
        if not docs:
            return TermMatrix(counts=counts, weights=counts.astype(np.float64), terms=terms)

        total_docs = len(docs)
        term_counts = np.asarray(self.counting_policy(counts), dtype=np.float64)
        idf = np.log(total_docs / term_counts)

        totals = counts.sum(axis=1, keepdims=True)
        tf = counts / np.maximum(totals, 1)
        weights = tf * idf

        logger.debug(
            f"TF-IDF: vectorized {total_docs} documents over "
            f"{len(terms)} distinct terms"
        )
        return TermMatrix(counts=counts, weights=weights, terms=terms)
