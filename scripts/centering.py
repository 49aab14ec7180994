# pylint: disable=too-many-arguments

from typing import Any, Mapping, Optional, Tuple, Union

import numpy as np
from centering_errors import DegenerateMass, InvalidThreshold
from mixture_state import MixtureState
from numba import jit
from tqdm import tqdm


@jit(nopython=True)
def pooled_moments_numba(
    mu_l: float,
    pro_l: float,
    sigmasq_l: float,
    mu_r: float,
    pro_r: float,
    sigmasq_r: float,
):
    """
    Compute the moments of the union of two mixture components.

    Numba-compiled kernel; the caller guarantees pro_l + pro_r > 0.

    Returns:
        Tuple of (mean, variance, proportion) of the combined component.
    """
    total = pro_l + pro_r
    mean = (mu_l * pro_l + mu_r * pro_r) / total
    var = (
        pro_l * (sigmasq_l + mu_l**2) + pro_r * (sigmasq_r + mu_r**2)
    ) / total - mean**2
    return mean, var, total


def combine_moments(
    mu_l: float,
    pro_l: float,
    sigmasq_l: float,
    mu_r: float,
    pro_r: float,
    sigmasq_r: float,
) -> Tuple[float, float, float]:
    """
    Pool two Gaussian components into one.

    The mean is the proportion-weighted mean, the variance is the pooled
    second moment minus the squared combined mean and the proportion is the
    sum of both proportions.

    Args:
        mu_l: Mean of the first component.
        pro_l: Proportion of the first component.
        sigmasq_l: Variance of the first component.
        mu_r: Mean of the second component.
        pro_r: Proportion of the second component.
        sigmasq_r: Variance of the second component.

    Returns:
        Tuple of (mean, variance, proportion) of the combined component.

    Raises:
        DegenerateMass: If both proportions are zero.
    """
    if not pro_l + pro_r > 0.0:
        raise DegenerateMass(
            f"Cannot merge components with total proportion {pro_l + pro_r}"
        )
    mean, var, total = pooled_moments_numba(
        float(mu_l),
        float(pro_l),
        float(sigmasq_l),
        float(mu_r),
        float(pro_r),
        float(sigmasq_r),
    )
    return float(mean), float(var), float(total)


def validate_threshold(min_center: Any) -> float:
    """Return min_center as a float, or raise InvalidThreshold if not in [0, 1]."""
    try:
        value = float(min_center)
    except (TypeError, ValueError) as exc:
        raise InvalidThreshold(f"min_center must be a number, got {min_center!r}") from exc

    # NaN fails both comparisons
    if not 0.0 <= value <= 1.0:
        raise InvalidThreshold(f"min_center must lie in [0, 1], got {value}")
    return value


def termination_reached(state: MixtureState, min_center: float) -> bool:
    """
    Check whether the reduction should stop.

    Args:
        state: Current mixture state.
        min_center: Minimal proportion required for the central component.

    Returns:
        True when a single component is left or when the component closest
        to zero already holds at least min_center of the mass.
    """
    if state.ngroups == 1:
        return True
    return bool(state.pro[state.closest_to_zero()] >= min_center)


def select_merge_pair(
    state: MixtureState, min_center: float
) -> Optional[Tuple[int, int]]:
    """
    Pick the two components to merge next.

    The two components with the smallest |mu| are selected. The survivor is
    the one with the lower index, not the one closer to zero.

    Args:
        state: Current mixture state.
        min_center: Minimal proportion required for the central component.

    Returns:
        Tuple (gl, gr) with gl < gr, or None if no merge is needed.
    """
    if state.ngroups < 2:
        return None

    omu = state.ranking()
    if state.pro[omu[0]] >= min_center:
        return None

    pair = omu[:2]
    return int(pair.min()), int(pair.max())


def merge_components(state: MixtureState, gl: int, gr: int) -> MixtureState:
    """
    Merge component gr into component gl.

    Every structure is rebuilt from the input, so the returned state never
    shares arrays with the input and the input is left unchanged. Removing
    gr shifts every later component down by one in mu, pro, sigmasq, the
    columns of z and the rows of groups alike.

    Args:
        state: Current mixture state with at least two components.
        gl: Index of the surviving component.
        gr: Index of the absorbed component, gr > gl.

    Returns:
        New state with ngroups - 1 components and center set to gl.

    Raises:
        DegenerateMass: If both components have zero proportion.
    """
    if not 0 <= gl < gr < state.ngroups:
        raise ValueError(
            f"Expected 0 <= gl < gr < {state.ngroups}, got gl={gl}, gr={gr}"
        )

    mean, var, total = combine_moments(
        state.mu[gl],
        state.pro[gl],
        state.sigmasq[gl],
        state.mu[gr],
        state.pro[gr],
        state.sigmasq[gr],
    )

    # gl < gr, so gl keeps its position after deleting gr
    z = np.delete(state.z, gr, axis=1)
    z[:, gl] = state.z[:, gl] + state.z[:, gr]

    mu = np.delete(state.mu, gr)
    mu[gl] = mean

    sigmasq = np.delete(state.sigmasq, gr)
    sigmasq[gl] = var

    pro = np.delete(state.pro, gr)
    pro[gl] = total

    groups = np.delete(state.groups, gr, axis=0)
    groups[gl, :] = state.groups[gl, :] + state.groups[gr, :]

    return MixtureState(mu, pro, z, groups, state.ngroups - 1, sigmasq, gl)


def merge_step(state: MixtureState, min_center: float) -> Tuple[MixtureState, bool]:
    """
    Perform one merge if the central component is too small.

    Returns:
        Tuple of (state, merged). When merged is False the input state is
        returned as is.
    """
    pair = select_merge_pair(state, min_center)
    if pair is None:
        return state, False
    return merge_components(state, *pair), True


def get_center(
    fit: Union[Mapping[str, Any], MixtureState],
    min_center: float,
    verbose: bool = False,
    loading_bar: bool = False,
) -> MixtureState:
    """
    Merge the components closest to zero until the central one is large enough.

    Components are merged pairwise, always the two with the smallest |mu|,
    until the component closest to zero holds at least min_center of the
    mixing mass or a single component is left. At most ngroups - 1 merges
    happen. The caller's arrays are copied and never modified.

    Args:
        fit: Mixture fit mapping (mu, pro, z, groups, ngroups, sigmasq) or a
            state returned by a previous call.
        min_center: Minimal proportion of the central component, in [0, 1].
        verbose: Whether to print each merge.
        loading_bar: Whether to show a progress bar over the merges.

    Returns:
        Reduced state. Its center is the 0-based index of the component
        closest to zero.

    Raises:
        InvalidThreshold: If min_center is outside [0, 1].
        DimensionMismatch: If the fit's arrays are inconsistent.
        DegenerateMass: If two zero-proportion components must be merged.
    """
    min_center = validate_threshold(min_center)
    state = MixtureState.from_fit(fit)
    ngroups0 = state.ngroups

    progress = tqdm(total=ngroups0 - 1, disable=not loading_bar)
    try:
        while not termination_reached(state, min_center):
            state, merged = merge_step(state, min_center)
            if not merged:
                break
            progress.update(1)
            if verbose:
                print(
                    f"Merged into component {state.center}: "
                    f"pro = {state.pro[state.center]:.4f}, "
                    f"{state.ngroups} component(s) left"
                )
    finally:
        progress.close()

    state.center = state.closest_to_zero()

    if verbose:
        print(
            f"Center component {state.center} holds {state.center_share():.4f} "
            f"after {ngroups0 - state.ngroups} merge(s)"
        )

    return state
