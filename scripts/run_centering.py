import argparse
import warnings

from center_metrics import create_metrics
from center_utils import (
    add_centering_args,
    create_output_message,
    print_metrics_summary,
    print_state_summary,
)
from centering import get_center
from generate_fit import load_fit
from mixture_state import MixtureState

warnings.filterwarnings("ignore", category=DeprecationWarning)


if __name__ == "__main__":
    ap = argparse.ArgumentParser(
        description="Merge mixture components near zero into a central cluster"
    )

    add_centering_args(ap)

    args = ap.parse_args()

    fit = load_fit(args.data, data_dir=args.data_dir)
    initial = MixtureState.from_fit(fit)

    if args.verbose:
        print_state_summary("initial fit", initial.as_fit())
        print(f"\nMerging until the center holds {args.min_center:.2%} of the mass…")

    final = get_center(
        fit,
        args.min_center,
        verbose=args.verbose,
        loading_bar=args.loading_bar,
    )

    metrics = create_metrics(
        initial,
        final,
        data_name=args.data,
        min_center=args.min_center,
        data_dir=args.data_dir,
    )

    if args.verbose:
        print_state_summary("centered fit", final.as_fit())
        print_metrics_summary(metrics)
        print(create_output_message(args.data, args.data_dir))
