"""Cosine similarity over term-weight matrices."""

from collections.abc import Sequence

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as pairwise_cosine_similarity

from suggestion_insights.services.tfidf import TermMatrix, TermVector

# Scores this close to 1.0 are snapped to exactly 1.0
SIMILARITY_EPSILON = 1e-9


def similarity_matrix(weights: np.ndarray) -> np.ndarray:
    """Pairwise cosine similarity of the rows of a weight matrix.

    Rows with zero norm score 0.0 against every row, themselves included.
    Scores are clamped to [0, 1], and identical non-zero rows score exactly 1.0.

    Args:
        weights: (documents x terms) weight matrix

    Returns:
        Symmetric (documents x documents) matrix
    """
    n_docs = weights.shape[0]
    if n_docs == 0 or weights.shape[1] == 0:
        return np.zeros((n_docs, n_docs))

    similarities = np.clip(pairwise_cosine_similarity(weights), 0.0, 1.0)
    similarities[np.isclose(similarities, 1.0, rtol=0.0, atol=SIMILARITY_EPSILON)] = 1.0
    return similarities


def cosine_similarity(vec_a: TermVector, vec_b: TermVector) -> float:
    """Cosine similarity of two sparse vectors.

    Terms missing from one vector count as weight 0. Returns 0.0 when either
    vector has zero norm.

    Args:
        vec_a: First term -> weight mapping
        vec_b: Second term -> weight mapping

    Returns:
        Similarity in [0, 1]
    """
    matrix = TermMatrix.from_vectors([vec_a, vec_b])
    return float(similarity_matrix(matrix.weights)[0, 1])


def average_pairwise_similarity(
    similarities: np.ndarray,
    members: Sequence[int] | None = None,
) -> float:
    """Mean similarity over all unordered pairs, 0.0 for fewer than two.

    Args:
        similarities: Square similarity matrix
        members: Row indices to average over, defaults to every row
    """
    if members is not None:
        similarities = similarities[np.ix_(members, members)]

    n_members = similarities.shape[0]
    if n_members < 2:
        return 0.0
    return float(np.mean(similarities[np.triu_indices(n_members, k=1)]))
