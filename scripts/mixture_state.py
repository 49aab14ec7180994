import warnings
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Union

import numpy as np
from centering_errors import DimensionMismatch

# tolerances for the soft (warning only) input checks
PRO_SUM_ATOL = 1e-6
ROW_SUM_ATOL = 1e-2


@dataclass(eq=False)
class MixtureState:
    """
    Working record of a one-dimensional Gaussian mixture fit being reduced.

    All per-component structures share the same 0-based component indexing:
    entry k of mu, pro and sigmasq, column k of z and row k of groups all
    describe the same component.

    Attributes:
        mu: Mean of each component.
        pro: Mixing proportion of each component.
        z: Responsibilities, shape (n_observations, ngroups).
        groups: 0/1 membership matrix, shape (ngroups, ngroups0). Entry
            [k, i] is 1 when original component i is part of component k.
        ngroups: Current number of components.
        sigmasq: Variance of each component.
        center: Index of the component whose mean is closest to zero.
    """

    mu: np.ndarray
    pro: np.ndarray
    z: np.ndarray
    groups: np.ndarray
    ngroups: int
    sigmasq: np.ndarray
    center: int

    @classmethod
    def from_fit(cls, fit: Union[Mapping[str, Any], "MixtureState"]) -> "MixtureState":
        """
        Build a state from a mixture fit, copying every array.

        Missing proportions default to equal shares, a missing membership
        matrix defaults to the identity and a single common variance is
        broadcast to every component.

        Args:
            fit: Mapping with keys mu, z, sigmasq and optionally pro, groups
                and ngroups, or a previously returned state.

        Returns:
            New state with center set to the component of smallest |mu|.

        Raises:
            DimensionMismatch: If the arrays disagree on the number of
                components.
        """
        if isinstance(fit, MixtureState):
            fit = fit.as_fit()

        mu = np.array(fit["mu"], dtype=float).ravel()
        ngroups = int(fit.get("ngroups", len(mu)))
        if ngroups < 1:
            raise DimensionMismatch(f"ngroups must be at least 1, got {ngroups}")

        pro = fit.get("pro")
        if pro is None:
            pro = np.full(ngroups, 1.0 / ngroups)
        else:
            pro = np.array(pro, dtype=float).ravel()

        # single common variance ("E" model)
        sigmasq = np.array(fit["sigmasq"], dtype=float).ravel()
        if sigmasq.size == 1 and ngroups > 1:
            sigmasq = np.full(ngroups, sigmasq[0])

        z = np.array(fit["z"], dtype=float)
        if z.ndim == 1 and ngroups == 1:
            z = z.reshape(-1, 1)

        groups = fit.get("groups")
        if groups is None:
            groups = np.eye(ngroups, dtype=int)
        else:
            groups = np.array(groups).astype(int)

        validate_dimensions(mu, pro, z, groups, ngroups, sigmasq)
        warn_on_soft_inconsistencies(pro, z)

        return cls(
            mu=mu,
            pro=pro,
            z=z,
            groups=groups,
            ngroups=ngroups,
            sigmasq=sigmasq,
            center=int(np.argmin(np.abs(mu))),
        )

    def ranking(self) -> np.ndarray:
        """Component indices ordered by ascending |mu|, ties by index."""
        return np.argsort(np.abs(self.mu), kind="stable")

    def closest_to_zero(self) -> int:
        return int(self.ranking()[0])

    def center_share(self) -> float:
        return float(self.pro[self.center])

    def copy(self) -> "MixtureState":
        return MixtureState(
            self.mu.copy(),
            self.pro.copy(),
            self.z.copy(),
            self.groups.copy(),
            self.ngroups,
            self.sigmasq.copy(),
            self.center,
        )

    def equals(self, other: "MixtureState") -> bool:
        """Exact comparison of every field."""
        return (
            self.ngroups == other.ngroups
            and self.center == other.center
            and np.array_equal(self.mu, other.mu)
            and np.array_equal(self.pro, other.pro)
            and np.array_equal(self.sigmasq, other.sigmasq)
            and np.array_equal(self.z, other.z)
            and np.array_equal(self.groups, other.groups)
        )

    def as_fit(self) -> Dict[str, Any]:
        """Render the state as a mixture-fit mapping with the same field names."""
        return {
            "mu": self.mu.copy(),
            "pro": self.pro.copy(),
            "z": self.z.copy(),
            "groups": self.groups.copy(),
            "ngroups": self.ngroups,
            "sigmasq": self.sigmasq.copy(),
            "center": self.center,
        }


def validate_dimensions(
    mu: np.ndarray,
    pro: np.ndarray,
    z: np.ndarray,
    groups: np.ndarray,
    ngroups: int,
    sigmasq: np.ndarray,
) -> None:
    """
    Check that every per-component structure has ngroups entries.

    Raises:
        DimensionMismatch: On the first inconsistent structure found.
    """
    if z.ndim != 2:
        raise DimensionMismatch(f"z must be a 2-D matrix, got {z.ndim} dimension(s)")
    if groups.ndim != 2:
        raise DimensionMismatch(
            f"groups must be a 2-D matrix, got {groups.ndim} dimension(s)"
        )

    sizes: List[tuple] = [
        ("mu", len(mu)),
        ("pro", len(pro)),
        ("sigmasq", len(sigmasq)),
        ("columns of z", z.shape[1]),
        ("rows of groups", groups.shape[0]),
    ]
    for name, size in sizes:
        if size != ngroups:
            raise DimensionMismatch(
                f"{name} must have ngroups={ngroups} entries, got {size}"
            )


def warn_on_soft_inconsistencies(pro: np.ndarray, z: np.ndarray) -> None:
    total = float(np.sum(pro))
    if not np.isclose(total, 1.0, rtol=0.0, atol=PRO_SUM_ATOL):
        warnings.warn(f"Mixing proportions sum to {total:.6g}, not 1", RuntimeWarning)

    if z.shape[0] > 0:
        deviation = float(np.max(np.abs(z.sum(axis=1) - 1.0)))
        if deviation > ROW_SUM_ATOL:
            warnings.warn(
                f"Responsibility rows deviate from 1 by up to {deviation:.3g}",
                RuntimeWarning,
            )
