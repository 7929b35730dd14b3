import pandas as pd
from typing import Optional
from pandera import Column, Check, DataFrameSchema
from pandera.errors import SchemaError

from radtidy.utils import InvalidGenotypeEncodingError

MARKER_METADATA_COLUMNS = ["MARKERS", "CHROM", "LOCUS", "POS"]

TidyGenotypeSchema = DataFrameSchema({
    "MARKERS": Column(nullable=False),
    "INDIVIDUALS": Column(nullable=False, required=False),
    "POP_ID": Column(required=False),
    # two 3-character allele codes, e.g. "001002"
    "GT": Column(checks=Check.str_length(6, 6), nullable=True, required=False),
    "GT_VCF": Column(nullable=True, required=False),
    "GT_BIN": Column(checks=Check.isin([0, 1, 2]), nullable=True, required=False),
})

# a marker must map to exactly one set of coordinates
MarkerMetadataSchema = DataFrameSchema({
    "MARKERS": Column(nullable=False, unique=True),
    "CHROM": Column(nullable=True, required=False),
    "LOCUS": Column(nullable=True, required=False),
    "POS": Column(nullable=True, required=False),
})


def validate_tidy(data: pd.DataFrame) -> pd.DataFrame:
    try:
        return TidyGenotypeSchema.validate(data)
    except SchemaError as e:
        raise InvalidGenotypeEncodingError(str(e)) from e


def validate_marker_metadata(data: pd.DataFrame) -> Optional[pd.DataFrame]:
    """Take the distinct (MARKERS, CHROM, LOCUS, POS) rows of a tidy
    table and check that every marker has a single set of coordinates.
    Only the coordinate columns present in the table are used.

    Args:
        data (pd.DataFrame): Tidy genotype table with canonical column names.

    Returns:
        markers (pd.DataFrame): Distinct marker metadata, one row per \
            marker, or None if the table has no CHROM, LOCUS or POS column.
    """
    cols = [c for c in MARKER_METADATA_COLUMNS if c in data.columns]
    if cols == ["MARKERS"]:
        return None
    markers = data[cols].drop_duplicates().reset_index(drop=True)
    try:
        return MarkerMetadataSchema.validate(markers)
    except SchemaError as e:
        raise InvalidGenotypeEncodingError(
            f"Markers map to more than one set of coordinates: {e}") from e
