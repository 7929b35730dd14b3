import pytest
import numpy as np
import pandas as pd


@pytest.fixture
def tidy_gt() -> pd.DataFrame:
    """6-character genotypes for 3 markers in 3 individuals.
    M1 is monomorphic once the missing call is ignored, M2 and
    M3 are polymorphic.

    Returns:
        pd.DataFrame
    """
    return pd.DataFrame({
        "MARKERS": ["M1", "M1", "M1", "M2", "M2", "M2", "M3", "M3", "M3"],
        "CHROM": ["1", "1", "1", "1", "1", "1", "2", "2", "2"],
        "LOCUS": ["10", "10", "10", "11", "11", "11", "20", "20", "20"],
        "POS": [5, 5, 5, 17, 17, 17, 3, 3, 3],
        "POP_ID": ["A", "A", "B"] * 3,
        "INDIVIDUALS": ["i1", "i2", "i3"] * 3,
        "GT": [
            "001001", "001001", "000000",
            "001002", "002002", "000000",
            "003003", "003004", "004004",
        ],
    })


@pytest.fixture
def tidy_gt_polymorphic() -> pd.DataFrame:
    return pd.DataFrame({
        "MARKERS": ["M2", "M2", "M3", "M3"],
        "POP_ID": ["A", "B", "A", "B"],
        "INDIVIDUALS": ["i1", "i2", "i1", "i2"],
        "GT": ["001002", "002002", "003003", "003004"],
    })


@pytest.fixture
def tidy_vcf() -> pd.DataFrame:
    """VCF-style genotypes for 3 markers in 4 individuals. Markers are
    listed out of alphabetical order and sit on different chromosomes
    so that misplaced metadata is easy to spot.

    Returns:
        pd.DataFrame
    """
    markers = ["rs3", "rs1", "rs2"]
    individuals = ["ind_b", "ind_a", "ind_d", "ind_c"]
    pops = {"ind_a": "pop2", "ind_b": "pop1", "ind_c": "pop1", "ind_d": "pop2"}
    chrom = {"rs1": "chr1", "rs2": "chr2", "rs3": "chr3"}
    pos = {"rs1": 100, "rs2": 200, "rs3": 300}
    gts = {
        "rs1": ["0/0", "0/1", "1/1", "./."],
        "rs2": ["0/1", "1/0", "0/0", "0/0"],
        "rs3": ["1/1", "1/1", "./.", "0/1"],
    }

    rows = []
    for m in markers:
        for ii, ind in enumerate(individuals):
            rows.append({
                "MARKERS": m,
                "CHROM": chrom[m],
                "LOCUS": m.upper(),
                "POS": pos[m],
                "POP_ID": pops[ind],
                "INDIVIDUALS": ind,
                "GT_VCF": gts[m][ii],
            })
    return pd.DataFrame(rows)


@pytest.fixture
def dosage_matrix_nans() -> np.ndarray:
    """dosage matrix of shape (N, G), where
    N is the number of individuals and G is the number
    of markers.
    """
    return np.array([
        [0, 2, np.nan],
        [2, np.nan, np.nan],
        [2, 0, np.nan],
        [np.nan, 0, np.nan],
    ]).astype(np.float64)
