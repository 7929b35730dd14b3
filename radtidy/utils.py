import pandas as pd
import numpy as np
from pathlib import Path
from typing import Dict, Iterable, Optional, Union
import numba

# sentinel used by the 6-character genotype encoding for missing calls
MISSING_GT = "000000"
MISSING_ALLELE = "000"

DOSAGE_LOOKUP = {
    "0/0": 0,
    "0/1": 1,
    "1/0": 1,
    "1/1": 2,
    "./.": np.nan,
    # phased calls
    "0|0": 0,
    "0|1": 1,
    "1|0": 1,
    "1|1": 2,
    ".|.": np.nan,
}


class MissingInputError(ValueError):
    """A required argument or column is absent."""


class InvalidGenotypeEncodingError(ValueError):
    """Genotypes are not encoded the way an operation needs them."""


def read_tidy(path: Union[str, Path]) -> pd.DataFrame:
    """Read a tidy genotype table from disk. Files ending in .csv
    are read as comma-separated, everything else as tab-separated.

    All columns are read as text so that genotype codes like
    "000000" or "001002" keep their leading zeros. Coordinates
    and dosages are converted back to numbers afterwards.

    Args:
        path (Union[str, Path]): Path to the tidy genotype file.

    Returns:
        tidy (pd.DataFrame): The tidy genotype table.
    """
    sep = "," if str(path).endswith(".csv") else "\t"
    tidy = pd.read_csv(path, sep=sep, dtype=str)
    for col in ("POS", "GT_BIN"):
        if col in tidy.columns:
            tidy[col] = pd.to_numeric(tidy[col])
    return tidy


def load_tidy(data: Union[pd.DataFrame, str, Path, None]) -> pd.DataFrame:
    if data is None:
        raise MissingInputError("Input file missing")
    if isinstance(data, (str, Path)):
        return read_tidy(data)
    return data


def normalize_columns(data: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of a tidy table with canonical column names.
    GENOTYPE becomes GT, and LOCUS becomes MARKERS when the table
    has no MARKERS column of its own.

    Args:
        data (pd.DataFrame): Tidy genotype table.

    Returns:
        tidy (pd.DataFrame): Copy of the table with renamed columns.
    """
    renames = {}
    if "GENOTYPE" in data.columns:
        renames["GENOTYPE"] = "GT"
    if "LOCUS" in data.columns and "MARKERS" not in data.columns:
        renames["LOCUS"] = "MARKERS"
    return data.rename(columns=renames)


def require_columns(data: pd.DataFrame, columns: Iterable[str]) -> None:
    missing = [c for c in columns if c not in data.columns]
    if len(missing) > 0:
        raise MissingInputError(
            f"Required column(s) missing from input: {', '.join(missing)}")


def split_alleles(gt: pd.Series) -> pd.DataFrame:
    """Split 6-character genotypes into their two 3-character alleles.

    Args:
        gt (pd.Series): Genotypes such as "001002".

    Returns:
        alleles (pd.DataFrame): Two columns, A1 (characters 1-3) and \
            A2 (characters 4-6), indexed like the input.
    """
    return pd.DataFrame({
        "A1": gt.str.slice(0, 3),
        "A2": gt.str.slice(3, 6),
    })


def melt_alleles(data: pd.DataFrame) -> pd.DataFrame:
    """Reshape the 6-character genotypes of a tidy table into one
    row per distinct (marker, allele) pair. Missing genotypes
    ("000000") are dropped first.

    Args:
        data (pd.DataFrame): Tidy genotype table with MARKERS and GT columns.

    Returns:
        alleles (pd.DataFrame): Deduplicated MARKERS and ALLELES columns.
    """
    calls = data[["MARKERS", "GT"]].dropna()
    calls = calls[calls["GT"] != MISSING_GT].drop_duplicates()

    alleles = split_alleles(calls["GT"])
    alleles["MARKERS"] = calls["MARKERS"]
    alleles = alleles.melt(
        id_vars="MARKERS",
        value_vars=["A1", "A2"],
        value_name="ALLELES",
    )
    return alleles[["MARKERS", "ALLELES"]].drop_duplicates().reset_index(drop=True)


def _vcf_alleles(data: pd.DataFrame) -> pd.DataFrame:
    calls = data[["MARKERS", "GT_VCF"]].dropna()
    alleles = calls.assign(
        ALLELES=calls["GT_VCF"].str.split(r"[/|]", regex=True),
    ).explode("ALLELES")
    return alleles[alleles["ALLELES"] != "."][["MARKERS", "ALLELES"]]


def detect_biallelic_markers(data: pd.DataFrame) -> bool:
    """Figure out whether every marker in a tidy table is biallelic,
    i.e., carries at most two distinct non-missing alleles across
    all individuals. VCF-style genotypes are used when present,
    then 6-character genotypes. A table that only carries dosages
    is biallelic by construction.

    Args:
        data (pd.DataFrame): Tidy genotype table with canonical column names.

    Returns:
        biallelic (bool): True if no marker has more than two alleles.
    """
    if "GT_VCF" not in data.columns and "GT" not in data.columns:
        if "GT_BIN" in data.columns:
            return True
        raise InvalidGenotypeEncodingError(
            "No genotype column (GT, GT_VCF or GT_BIN) found in input")
    require_columns(data, ["MARKERS"])

    if "GT_VCF" in data.columns:
        alleles = _vcf_alleles(data)
    else:
        alleles = melt_alleles(data)
        alleles = alleles[alleles["ALLELES"] != MISSING_ALLELE]
    n_alleles = alleles.groupby("MARKERS")["ALLELES"].nunique()
    return bool((n_alleles <= 2).all())


def encode_dosage(
    gt_vcf: pd.Series,
    lookup: Optional[Dict[str, float]] = None,
) -> pd.Series:
    """Convert VCF-style genotypes to integer dosages.

    Args:
        gt_vcf (pd.Series): Genotypes such as "0/1", "0|1" or "./.".

        lookup (Dict[str, float], optional): Mapping from genotype \
            string to dosage. None values are treated as missing. \
            Defaults to DOSAGE_LOOKUP.

    Returns:
        dosage (pd.Series): Dosages (0, 1, 2) as floats, with \
            np.nan for missing genotypes.
    """
    if lookup is None:
        lookup = DOSAGE_LOOKUP
    lookup = {k: np.nan if v is None else v for k, v in lookup.items()}

    unknown = gt_vcf.notna() & ~gt_vcf.isin(list(lookup))
    if unknown.any():
        bad = sorted(gt_vcf[unknown].astype(str).unique())
        raise InvalidGenotypeEncodingError(
            f"Genotype(s) not in the dosage lookup: {', '.join(bad)}")
    return gt_vcf.map(lookup).astype(np.float64)


@numba.njit
def compute_allele_counts(genotype_matrix: np.ndarray):
    """Given a dosage matrix of size (N, G), where N is the number
    of individuals and G is the number of markers, count the alleles
    at every marker, ignoring missing genotypes.

    Args:
        genotype_matrix (np.ndarray): A 2D numpy array of dosages \
            with np.nan for missing genotypes.

    Returns:
        allele_counts (np.ndarray): A 1D numpy array of size (G, ) with \
            the sum of dosages at each marker.
        allele_numbers (np.ndarray): A 1D numpy array of size (G, ) with \
            the number of called alleles (2 per non-missing genotype).
    """
    n_ind, n_loc = genotype_matrix.shape
    allele_counts = np.zeros(n_loc)
    allele_numbers = np.zeros(n_loc)
    for gi in range(n_loc):
        for ni in range(n_ind):
            g = genotype_matrix[ni, gi]
            if not np.isnan(g):
                allele_counts[gi] += g
                allele_numbers[gi] += 2
    return allele_counts, allele_numbers


@numba.njit
def compute_missing_counts(genotype_matrix: np.ndarray) -> np.ndarray:
    n_ind, n_loc = genotype_matrix.shape
    missing = np.zeros(n_loc)
    for gi in range(n_loc):
        for ni in range(n_ind):
            if np.isnan(genotype_matrix[ni, gi]):
                missing[gi] += 1
    return missing
