# pylint: disable=too-many-arguments

from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
from scipy.stats import norm


def compute_responsibilities(
    y: np.ndarray, mu: np.ndarray, pro: np.ndarray, sigmasq: np.ndarray
) -> np.ndarray:
    """
    Compute posterior component probabilities for each data point.

    Works in log space and subtracts the row maximum before exponentiating,
    so far-away components underflow to zero instead of producing NaN.

    Args:
        y: Observed data points.
        mu: Mean of each component.
        pro: Mixing proportion of each component.
        sigmasq: Variance of each component.

    Returns:
        Matrix of shape (len(y), len(mu)) whose rows sum to 1.
    """
    y = np.asarray(y, dtype=float)
    mu = np.asarray(mu, dtype=float)
    pro = np.asarray(pro, dtype=float)
    sigmasq = np.asarray(sigmasq, dtype=float)

    with np.errstate(divide="ignore"):
        log_pro = np.log(pro)
    logw = log_pro[np.newaxis, :] + norm.logpdf(
        y[:, np.newaxis], loc=mu[np.newaxis, :], scale=np.sqrt(sigmasq)[np.newaxis, :]
    )
    logw -= logw.max(axis=1, keepdims=True)
    probs = np.exp(logw)
    probs /= probs.sum(axis=1, keepdims=True)
    return probs


def generate_fit(
    n: int,
    means: List[float],
    weights: List[float],
    sigmas: List[float],
    seed: Optional[int] = None,
) -> Dict[str, np.ndarray]:
    """
    Simulate data from a Gaussian mixture and build the matching mixture fit.

    The fit uses the generating parameters directly, with responsibilities
    computed for the simulated points, so it can stand in for the output of
    a mixture fitting procedure.

    Args:
        n: Number of data points to generate.
        means: Mean of each Gaussian component.
        weights: Mixture weight of each component (must sum to 1).
        sigmas: Standard deviation of each component.
        seed: Seed for the random number generator (optional).

    Returns:
        Dictionary with the simulated data under "y" and the fit fields mu,
        pro, z, groups, ngroups and sigmasq.

    Raises:
        ValueError: If the parameter lengths differ or the weights do not
            sum to 1.
    """
    if not len(means) == len(weights) == len(sigmas):
        raise ValueError("The lengths of means, weights and sigmas must be equal")

    if not np.isclose(sum(weights), 1.0):
        raise ValueError("The weights must sum to 1")

    rng = np.random.default_rng(seed)
    K = len(means)

    means_array = np.array(means, dtype=float)
    weights_array = np.array(weights, dtype=float)
    sigmasq_array = np.array(sigmas, dtype=float) ** 2

    classes = rng.choice(K, size=n, p=weights_array)
    y = rng.normal(means_array[classes], np.sqrt(sigmasq_array[classes]))

    return {
        "y": y,
        "mu": means_array,
        "pro": weights_array,
        "z": compute_responsibilities(y, means_array, weights_array, sigmasq_array),
        "groups": np.eye(K, dtype=int),
        "ngroups": K,
        "sigmasq": sigmasq_array,
    }


def save_fit(fit: Dict[str, np.ndarray], name: str, data_dir: str = "../data") -> Path:
    """
    Save a generated fit as {data_dir}/{name}/data.npy and fit.npz.

    Returns:
        Path of the dataset directory.
    """
    out_dir = Path(data_dir) / name
    out_dir.mkdir(parents=True, exist_ok=True)
    np.save(out_dir / "data.npy", fit["y"])
    np.savez(
        out_dir / "fit.npz",
        mu=fit["mu"],
        pro=fit["pro"],
        z=fit["z"],
        groups=fit["groups"],
        ngroups=fit["ngroups"],
        sigmasq=fit["sigmasq"],
    )
    return out_dir


def load_fit(name: str, data_dir: str = "../data") -> Dict[str, np.ndarray]:
    """Load the fit saved by save_fit as a plain dictionary."""
    with np.load(Path(data_dir) / name / "fit.npz") as saved:
        fit = {key: saved[key] for key in saved.files}
    fit["ngroups"] = int(fit["ngroups"])
    return fit


if __name__ == "__main__":
    n = 600

    # noise components around zero plus one gain and one loss state
    sigmas = [0.04, 0.04, 0.04, 0.04, 0.04]
    means = [-0.23626, -0.08108, -0.02205, 0.03059, 0.24482]
    weights = [0.2, 0.2, 0.2, 0.2, 0.2]
    save_fit(generate_fit(n, means, weights, sigmas, seed=0), "example_1")

    sigmas = [0.1, 0.05, 0.05, 0.05, 0.1]
    means = [-0.6, -0.05, 0.01, 0.06, 0.45]
    weights = [0.1, 0.25, 0.2, 0.3, 0.15]
    save_fit(generate_fit(n, means, weights, sigmas, seed=1), "example_2")

    sigmas = [0.2, 0.1, 0.1, 0.1]
    means = [-1.0, -0.3, 0.3, 1.0]
    weights = [0.25, 0.25, 0.25, 0.25]
    save_fit(generate_fit(n, means, weights, sigmas, seed=2), "example_3")
