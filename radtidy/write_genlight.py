import pandas as pd
import numpy as np
import argparse
import json
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from radtidy.genlight import GenotypeMatrix
from radtidy.schema import validate_tidy, validate_marker_metadata
from radtidy.utils import (
    InvalidGenotypeEncodingError,
    detect_biallelic_markers,
    encode_dosage,
    load_tidy,
    normalize_columns,
    require_columns,
)

logger = logging.getLogger(__name__)


def write_genlight(
    data: Union[pd.DataFrame, str, Path],
    biallelic: Optional[bool] = True,
    genotypes: Optional[Dict[str, float]] = None,
) -> GenotypeMatrix:
    """Build a GenotypeMatrix from a tidy genotype table. Individuals
    are sorted by population and then by name, and markers are sorted
    by identifier. The chromosome, locus and position attached to each
    column are looked up from that same sorted marker list.

    Args:
        data (Union[pd.DataFrame, str, Path]): Tidy genotype table, or a \
            path to one on disk, with MARKERS (or LOCUS), INDIVIDUALS, \
            POP_ID and either GT_BIN or GT_VCF columns.

        biallelic (bool, optional): Whether the genotypes are known to be \
            biallelic. If None, the table is scanned to find out. \
            Defaults to True.

        genotypes (Dict[str, float], optional): Mapping from GT_VCF \
            genotype to dosage, used in place of the default when GT_BIN \
            has to be derived. Defaults to None.

    Returns:
        GenotypeMatrix: Dosages of every individual at every marker.
    """
    tidy = normalize_columns(load_tidy(data))
    require_columns(tidy, ["MARKERS", "INDIVIDUALS", "POP_ID"])

    if biallelic is None:
        biallelic = detect_biallelic_markers(tidy)
    if not biallelic:
        raise InvalidGenotypeEncodingError(
            "genlight object requires biallelic genotypes")

    validate_tidy(tidy)
    marker_meta = validate_marker_metadata(tidy)

    if "GT_BIN" not in tidy.columns:
        if "GT_VCF" not in tidy.columns:
            raise InvalidGenotypeEncodingError(
                "genlight object requires a GT_BIN or GT_VCF genotype column")
        tidy = tidy.assign(GT_BIN=encode_dosage(tidy["GT_VCF"], genotypes))

    # matrix columns and marker metadata are both ordered by this list
    markers = sorted(tidy["MARKERS"].unique())

    try:
        wide = tidy.pivot(
            index=["POP_ID", "INDIVIDUALS"],
            columns="MARKERS",
            values="GT_BIN",
        )
    except ValueError as e:
        raise InvalidGenotypeEncodingError(
            f"An individual has more than one genotype at a marker: {e}") from e
    wide = wide.reindex(columns=markers).sort_index()

    chromosome, loc_names, position = None, None, None
    if marker_meta is not None:
        marker_meta = marker_meta.set_index("MARKERS").reindex(markers)
        if "CHROM" in marker_meta.columns:
            chromosome = marker_meta["CHROM"].to_numpy()
        if "LOCUS" in marker_meta.columns:
            loc_names = marker_meta["LOCUS"].to_numpy()
        if "POS" in marker_meta.columns:
            position = marker_meta["POS"].to_numpy()

    genlight = GenotypeMatrix(
        wide.to_numpy(dtype=np.float64, na_value=np.nan),
        ind_names=wide.index.get_level_values("INDIVIDUALS").to_numpy(),
        pop=wide.index.get_level_values("POP_ID").to_numpy(),
        marker_names=np.asarray(markers),
        loc_names=loc_names,
        chromosome=chromosome,
        position=position,
    )
    logger.info(
        "Built genotype matrix of %d individuals and %d markers",
        genlight.n_ind,
        genlight.n_loc,
    )
    return genlight


def main(args):
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    # optional JSON config with a custom genotype -> dosage mapping
    genotypes = None
    if args.config is not None:
        with open(args.config, "rb") as config:
            config_dict = json.load(config)
        genotypes = config_dict.get("genotypes")

    biallelic = None if args.detect_biallelic else True
    genlight = write_genlight(args.tidy, biallelic=biallelic, genotypes=genotypes)

    genlight.to_dataframe().to_csv(f"{args.out}.geno.csv", index=False)
    genlight.marker_metadata().to_csv(f"{args.out}.markers.csv", index=False)


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
        help="Prefix of the output files, PREFIX.geno.csv and PREFIX.markers.csv.",
    )
    p.add_argument(
        "--config",
        type=str,
        default=None,
        help="""Path to config file in JSON format. A "genotypes" entry maps GT_VCF genotypes to dosages (null for missing).""",
    )
    p.add_argument(
        "-detect_biallelic",
        action="store_true",
        help="""Scan the genotypes to check that they are biallelic instead of assuming it.""",
    )
    args = p.parse_args()

    main(args)
