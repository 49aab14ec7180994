import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
from mixture_state import MixtureState


def mass_deviation(before: MixtureState, after: MixtureState) -> float:
    """Absolute change of the total mixing proportion between two states."""
    return float(abs(np.sum(after.pro) - np.sum(before.pro)))


def row_sum_deviation(z: np.ndarray) -> float:
    """Largest absolute deviation of a responsibility row sum from 1."""
    if z.shape[0] == 0:
        return 0.0
    return float(np.max(np.abs(z.sum(axis=1) - 1.0)))


def partition_is_valid(groups: np.ndarray) -> bool:
    """
    Check that groups is a 0/1 partition of the original components.

    Args:
        groups: Membership matrix, one row per current component and one
            column per original component.

    Returns:
        True if every entry is 0 or 1 and every column holds exactly one 1.
    """
    groups = np.asarray(groups)
    if groups.ndim != 2:
        return False
    if not np.all((groups == 0) | (groups == 1)):
        return False
    return bool(np.all(groups.sum(axis=0) == 1))


def component_members(groups: np.ndarray) -> List[List[int]]:
    """
    List the original components making up each current component.

    Returns:
        One list of 0-based original component indices per row of groups.
    """
    return [np.flatnonzero(row).tolist() for row in np.asarray(groups)]


def create_metrics(
    initial: MixtureState,
    final: MixtureState,
    data_name: Optional[str] = None,
    min_center: Optional[float] = None,
    data_dir: str = "../data",
) -> Dict[str, Any]:
    """
    Summarise a center-cluster reduction and check its invariants.

    When data_name is given, the summary is stored under the "centering" key
    of {data_dir}/{data_name}/metrics.json, keeping whatever else that file
    already holds.

    Args:
        initial: State before any merge.
        final: State returned by the reduction.
        data_name: Name of the dataset directory (optional).
        min_center: Threshold used for the reduction (optional).
        data_dir: Root directory of the datasets.

    Returns:
        Dictionary with the merge count, the central component and the
        invariant checks.
    """
    summary: Dict[str, Any] = {
        "ngroups_initial": initial.ngroups,
        "ngroups_final": final.ngroups,
        "merges": initial.ngroups - final.ngroups,
        "center": final.center,
        "center_share": final.center_share(),
        "center_members": component_members(final.groups)[final.center],
        "mu": final.mu.tolist(),
        "pro": final.pro.tolist(),
        "sigmasq": final.sigmasq.tolist(),
        "mass_deviation": mass_deviation(initial, final),
        "row_sum_deviation": row_sum_deviation(final.z),
        "partition_valid": partition_is_valid(final.groups),
    }
    if min_center is not None:
        summary["min_center"] = min_center
        summary["threshold_met"] = bool(
            final.center_share() >= min_center or final.ngroups == 1
        )

    if data_name is None:
        return summary

    metrics_file = Path(data_dir) / data_name / "metrics.json"
    try:
        with open(metrics_file, encoding="utf-8") as f:
            metrics_dict = json.load(f)
    except FileNotFoundError:
        metrics_dict = {}

    metrics_dict["centering"] = summary

    metrics_file.parent.mkdir(parents=True, exist_ok=True)
    with open(metrics_file, "w", encoding="utf-8") as f:
        json.dump(metrics_dict, f, indent=2)

    return summary
