"""Wordfish: unsupervised Poisson scaling of document positions.

Counts are modelled as ``y_ij ~ Poisson(exp(alpha_i + psi_j + beta_j * theta_i))``
(Slapin & Proksch 2008). Document and word parameters are estimated by
alternating damped Newton updates until the log-likelihood stabilises.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import numpy as np
from loguru import logger

from ..errors import EmptyVocabularyError, InsufficientReferenceDataError
from ..features import DocumentTermMatrix
from .base import ScoreResult, ScoringInput

MAX_HALVINGS = 20


@dataclass(frozen=True)
class WordfishModel:
    """Fitted Wordfish parameters for the documents and features it saw."""

    doc_ids: tuple[str, ...]
    features: tuple[str, ...]
    theta: np.ndarray
    theta_se: np.ndarray
    alpha: np.ndarray
    beta: np.ndarray
    psi: np.ndarray
    loglik: float
    iterations: int
    converged: bool

    def scores(self) -> dict[str, float]:
        return {doc_id: float(value) for doc_id, value in zip(self.doc_ids, self.theta)}


def _loglik(y: np.ndarray, alpha, theta, psi, beta) -> float:
    eta = alpha[:, None] + psi[None, :] + np.outer(theta, beta)
    return float((y * eta - np.exp(eta)).sum())


def _newton_pair(
    y: np.ndarray,
    offset: np.ndarray,
    covariate: np.ndarray,
    intercept: np.ndarray,
    slope: np.ndarray,
    slope_var: float,
    fix_intercept: np.ndarray,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """One safeguarded Newton step for per-row (intercept, slope) pairs.

    Row ``i`` of ``y`` has linear predictor
    ``offset + intercept[i] + slope[i] * covariate``. Returns the new
    intercepts, slopes and the slope variances from the observed information.
    """

    def objective(a: np.ndarray, b: np.ndarray) -> np.ndarray:
        eta = a[:, None] + offset[None, :] + np.outer(b, covariate)
        return (y * eta - np.exp(eta)).sum(axis=1) - b**2 / (2 * slope_var)

    eta = intercept[:, None] + offset[None, :] + np.outer(slope, covariate)
    lam = np.exp(eta)
    resid = y - lam
    g_a = resid.sum(axis=1)
    g_b = resid @ covariate - slope / slope_var
    h_aa = -lam.sum(axis=1)
    h_ab = -(lam @ covariate)
    h_bb = -(lam @ covariate**2) - 1.0 / slope_var
    det = h_aa * h_bb - h_ab**2

    d_a = -(h_bb * g_a - h_ab * g_b) / det
    d_b = -(h_aa * g_b - h_ab * g_a) / det
    d_a = np.where(fix_intercept, 0.0, d_a)
    d_b = np.where(fix_intercept, -g_b / h_bb, d_b)

    base = objective(intercept, slope)
    step = np.ones_like(intercept)
    new_a, new_b = intercept + d_a, slope + d_b
    for _ in range(MAX_HALVINGS):
        worse = ~(objective(new_a, new_b) >= base)
        if not worse.any():
            break
        step = np.where(worse, step / 2, step)
        new_a = np.where(worse, intercept + step * d_a, new_a)
        new_b = np.where(worse, slope + step * d_b, new_b)
    else:
        worse = ~(objective(new_a, new_b) >= base)
        new_a = np.where(worse, intercept, new_a)
        new_b = np.where(worse, slope, new_b)

    slope_variance = np.where(fix_intercept, -1.0 / h_bb, -h_aa / det)
    return new_a, new_b, slope_variance


def _starting_values(y: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    row_means = y.mean(axis=1)
    alpha = np.log(row_means / row_means[0])
    psi = np.log(y.mean(axis=0))
    residual = np.log(y + 0.1) - alpha[:, None] - psi[None, :]
    u, d, vt = np.linalg.svd(residual, full_matrices=False)
    theta = u[:, 0]
    beta = vt[0] * d[0]
    return alpha, psi, theta, beta


def _standardise(alpha, psi, theta, beta):
    shift = alpha[0]
    alpha = alpha - shift
    psi = psi + shift
    mean, sd = theta.mean(), theta.std()
    if sd > 0:
        psi = psi + beta * mean
        beta = beta * sd
        theta = (theta - mean) / sd
    return alpha, psi, theta, beta


def fit_wordfish(
    matrix: DocumentTermMatrix,
    direction: tuple[int, int] = (0, 1),
    tol: float = 1e-6,
    max_iter: int = 500,
    beta_prior_sd: float = 3.0,
    theta_prior_sd: float = 1.0,
) -> WordfishModel:
    """Estimate document positions ``theta`` from ``matrix``.

    ``direction`` fixes the sign of the scale so that
    ``theta[direction[0]] < theta[direction[1]]``. Reaching ``max_iter`` without
    convergence is logged as a warning and reported through ``converged``.
    """
    y = matrix.counts.toarray().astype(float)
    n_docs, n_features = y.shape
    if n_docs < 2:
        raise InsufficientReferenceDataError(f"Wordfish needs at least 2 documents, got {n_docs}.")
    if n_features == 0:
        raise EmptyVocabularyError("Wordfish needs at least one feature.")
    if (y.sum(axis=1) == 0).any():
        raise InsufficientReferenceDataError("Wordfish cannot fit documents without any feature counts.")
    if (y.sum(axis=0) == 0).any():
        raise EmptyVocabularyError("Wordfish cannot fit features that never occur.")
    for position in direction:
        if not 0 <= position < n_docs:
            raise InsufficientReferenceDataError(f"direction index {position} out of range for {n_docs} documents")

    alpha, psi, theta, beta = _standardise(*_starting_values(y))
    fix_first = np.zeros(n_docs, dtype=bool)
    fix_first[0] = True
    free = np.zeros(n_features, dtype=bool)
    theta_var = np.full(n_docs, np.nan)

    loglik = _loglik(y, alpha, theta, psi, beta)
    converged = False
    iterations = 0
    with np.errstate(over="ignore", invalid="ignore"):
        for iterations in range(1, max_iter + 1):
            alpha, theta, theta_var = _newton_pair(
                y, psi, beta, alpha, theta, theta_prior_sd**2, fix_first
            )
            psi, beta, _ = _newton_pair(
                y.T, alpha, theta, psi, beta, beta_prior_sd**2, free
            )
            scale = theta.std()
            if scale > 0:
                theta_var = theta_var / scale**2
            alpha, psi, theta, beta = _standardise(alpha, psi, theta, beta)

            updated = _loglik(y, alpha, theta, psi, beta)
            change = abs(updated - loglik) / max(abs(loglik), 1e-12)
            loglik = updated
            logger.trace("wordfish:iteration | n={} | loglik={:.4f} | change={:.2e}", iterations, loglik, change)
            if change < tol:
                converged = True
                break

    if theta[direction[0]] > theta[direction[1]]:
        theta, beta = -theta, -beta

    if not converged:
        logger.warning("wordfish:not_converged | iterations={} | loglik={:.4f}", iterations, loglik)

    return WordfishModel(
        doc_ids=matrix.doc_ids,
        features=matrix.features,
        theta=theta,
        theta_se=np.sqrt(np.abs(theta_var)),
        alpha=alpha,
        beta=beta,
        psi=psi,
        loglik=loglik,
        iterations=iterations,
        converged=converged,
    )


@dataclass
class WordfishStrategy:
    """Direct strategy: fitting yields the per-document positions."""

    direction: tuple[str, str] | None = None
    tol: float = 1e-6
    max_iter: int = 500
    name: str = "wordfish"
    fitter: Callable[..., WordfishModel] = fit_wordfish

    def produce_scores(self, data: ScoringInput) -> ScoreResult:
        target = data.matrix.subset(data.targets())
        occupied = target.row_totals() > 0
        fitted_ids = [doc_id for doc_id, keep in zip(target.doc_ids, occupied) if keep]
        skipped = len(target.doc_ids) - len(fitted_ids)
        if skipped:
            logger.warning("wordfish:empty_documents | skipped={}", skipped)

        fitted = target.subset(fitted_ids)
        used = fitted.term_frequency() > 0
        fitted = fitted.select_features([name for name, keep in zip(fitted.features, used) if keep])

        positions = (0, 1)
        if self.direction is not None:
            index = fitted.row_index()
            unknown = [doc_id for doc_id in self.direction if doc_id not in index]
            if unknown:
                raise InsufficientReferenceDataError(
                    f"Direction document(s) not among non-empty target documents: {', '.join(unknown)}"
                )
            if self.direction[0] == self.direction[1]:
                raise InsufficientReferenceDataError("Direction needs two different documents.")
            positions = (index[self.direction[0]], index[self.direction[1]])

        model = self.fitter(fitted, direction=positions, tol=self.tol, max_iter=self.max_iter)
        return ScoreResult(
            strategy=self.name,
            columns={
                self.name: model.scores(),
                f"{self.name}_se": {
                    doc_id: float(value) for doc_id, value in zip(model.doc_ids, model.theta_se)
                },
            },
            metadata={
                "converged": model.converged,
                "iterations": model.iterations,
                "loglik": model.loglik,
                "features": len(model.features),
                "direction": list(self.direction) if self.direction else list(model.doc_ids[:2]),
                "unscored_documents": skipped,
            },
        )
