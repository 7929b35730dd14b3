import pandas as pd
import argparse
import logging
from pathlib import Path
from typing import NamedTuple, Union

from radtidy.utils import (
    load_tidy,
    melt_alleles,
    normalize_columns,
    require_columns,
)
from radtidy.schema import (
    MARKER_METADATA_COLUMNS,
    validate_tidy,
    validate_marker_metadata,
)

logger = logging.getLogger(__name__)


class MonomorphicMarkers(NamedTuple):
    tidy: pd.DataFrame
    blacklist_monomorphic_markers: pd.DataFrame
    whitelist_polymorphic_markers: pd.DataFrame


def find_monomorphic_markers(tidy: pd.DataFrame) -> pd.Series:
    """Find the markers at which every non-missing allele is identical.

    Args:
        tidy (pd.DataFrame): Tidy genotype table with MARKERS and GT columns.

    Returns:
        markers (pd.Series): Sorted identifiers of the monomorphic markers.
    """
    n_alleles = melt_alleles(tidy).groupby("MARKERS").size()
    return pd.Series(n_alleles[n_alleles == 1].index, name="MARKERS", dtype=object)


def discard_monomorphic_markers(
    data: Union[pd.DataFrame, str, Path],
    verbose: bool = False,
) -> MonomorphicMarkers:
    """Remove monomorphic markers from a tidy genotype table.

    Args:
        data (Union[pd.DataFrame, str, Path]): Tidy genotype table, or \
            a path to one on disk. Must have a MARKERS (or LOCUS) column \
            and a GT (or GENOTYPE) column of 6-character genotypes.

        verbose (bool, optional): Whether to log the number of markers \
            before and after filtering. Defaults to False.

    Returns:
        MonomorphicMarkers: The filtered table, the blacklist of \
            monomorphic markers that were removed and the whitelist of \
            polymorphic markers that were kept. The whitelist carries \
            whichever of CHROM, LOCUS and POS the input has, and the \
            blacklist carries them when the input has CHROM.
    """
    tidy = normalize_columns(load_tidy(data))
    require_columns(tidy, ["MARKERS", "GT"])
    validate_tidy(tidy)

    markers_df = validate_marker_metadata(tidy)
    want = [c for c in MARKER_METADATA_COLUMNS if c in tidy.columns]
    # coordinates are only reported for removed markers when CHROM is known
    if "CHROM" not in tidy.columns:
        markers_df = None

    if verbose:
        logger.info("Scanning for monomorphic markers...")
        logger.info(
            "    Number of markers before = %d", tidy["MARKERS"].nunique())

    mono_markers = find_monomorphic_markers(tidy)

    if verbose:
        logger.info(
            "    Number of monomorphic markers removed = %d", len(mono_markers))

    if len(mono_markers) > 0:
        tidy = tidy[~tidy["MARKERS"].isin(mono_markers)]
        if verbose:
            logger.info(
                "    Number of markers after = %d", tidy["MARKERS"].nunique())
        blacklist = mono_markers.to_frame()
        if markers_df is not None:
            blacklist = blacklist.merge(markers_df, on="MARKERS", how="left")
    elif markers_df is not None:
        blacklist = markers_df.iloc[:0].reset_index(drop=True)
    else:
        blacklist = pd.DataFrame({"MARKERS": pd.Series(dtype=object)})

    whitelist = tidy[want].drop_duplicates(subset="MARKERS").reset_index(drop=True)

    return MonomorphicMarkers(tidy, blacklist, whitelist)


def main(args):
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    res = discard_monomorphic_markers(args.tidy, verbose=args.verbose)

    res.tidy.to_csv(f"{args.out}.tsv", sep="\t", index=False)
    res.blacklist_monomorphic_markers.to_csv(
        f"{args.out}.blacklist.monomorphic.markers.tsv",
        sep="\t",
        index=False,
    )
    res.whitelist_polymorphic_markers.to_csv(
        f"{args.out}.whitelist.polymorphic.markers.tsv",
        sep="\t",
        index=False,
    )


if __name__ == "__main__":
    p = argparse.ArgumentParser()
    p.add_argument(
        "--tidy",
        type=str,
        required=True,
        help="Path to a tidy genotype table (tab-separated, or comma-separated with a .csv suffix).",
    )
    p.add_argument(
        "--out",
        required=True,
        help="Prefix of the output files. The filtered table is written to PREFIX.tsv and the marker lists next to it.",
    )
    p.add_argument(
        "-verbose",
        action="store_true",
        help="Whether to report the number of markers before and after filtering.",
    )
    args = p.parse_args()

    main(args)
