from typing import Any, Dict

import numpy as np

DEFAULT_MIN_CENTER = 0.4


def add_common_args(subparser):
    """Add common arguments to an argument parser.

    Args:
        subparser: ArgumentParser subparser to add arguments to
    """
    subparser.add_argument(
        "--data", type=str, default="example_1", help="Data directory"
    )
    subparser.add_argument(
        "--data_dir", type=str, default="../data", help="Root of the data directories"
    )
    subparser.add_argument(
        "--verbose", action="store_true", help="Indicates if verbose output is desired"
    )


def add_centering_args(subparser):
    """Add center-cluster reduction arguments to an argument parser.

    Args:
        subparser: ArgumentParser subparser to add arguments to
    """
    add_common_args(subparser)
    subparser.add_argument(
        "--min_center",
        type=float,
        default=DEFAULT_MIN_CENTER,
        help="Minimal share of the central cluster, between 0 and 1",
    )
    subparser.add_argument(
        "--loading_bar", action="store_true", help="Show a progress bar over merges"
    )


def print_state_summary(title: str, fit: Dict[str, Any]):
    """Print the components of a mixture fit.

    Args:
        title: Header line
        fit: Mixture fit mapping with mu, pro, sigmasq and optionally center
    """
    print(f"\n=== {title.upper()} ===")
    print("Means (μ)          :", np.round(fit["mu"], 5))
    print("Proportions        :", np.round(fit["pro"], 4))
    print("Variances (σ²)     :", np.round(fit["sigmasq"], 6))
    if "center" in fit:
        print("Center component   :", fit["center"])


def print_metrics_summary(metrics: Dict[str, Any]):
    """Print the invariant checks of a reduction.

    Args:
        metrics: Dictionary returned by create_metrics
    """
    print(f"\nMerges performed   : {metrics['merges']}")
    print(f"Center share       : {metrics['center_share']:.4f}")
    print(f"Center members     : {metrics['center_members']}")
    print(f"Mass deviation     : {metrics['mass_deviation']:.2e}")
    print(f"Row-sum deviation  : {metrics['row_sum_deviation']:.2e}")
    print(f"Partition valid    : {metrics['partition_valid']}")


def create_output_message(data_name, data_dir="../data"):
    """Create standardized output message for the metrics file.

    Args:
        data_name: Name of the dataset
        data_dir: Root of the data directories

    Returns:
        Formatted output message string
    """
    return f"\nMetrics saved in {data_dir}/{data_name}/metrics.json"
