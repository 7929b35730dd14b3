import pandas as pd
import numpy as np
import allel
from typing import List, Optional, Sequence

from radtidy.utils import compute_allele_counts, compute_missing_counts


class GenotypeMatrix:
    """Individual-by-marker matrix of biallelic dosages, with the
    metadata needed by downstream population genetics tools. This is
    the Python counterpart of an adegenet genlight object.

    Args:
        gt (np.ndarray): A 2D numpy array of size (N, G), where N is \
            the number of individuals and G the number of markers. \
            Values are 0, 1 or 2, with np.nan for missing genotypes.

        ind_names (Sequence[str]): Individual names, one per row.

        pop (Sequence[str]): Population of each individual.

        marker_names (Sequence[str]): Marker identifiers, one per column.

        loc_names (Sequence[str], optional): Locus names, one per column. \
            Defaults to the marker identifiers.

        chromosome (Sequence[str], optional): Chromosome of each marker.

        position (Sequence[int], optional): Position of each marker.
    """

    def __init__(
        self,
        gt: np.ndarray,
        ind_names: Sequence[str],
        pop: Sequence[str],
        marker_names: Sequence[str],
        loc_names: Optional[Sequence[str]] = None,
        chromosome: Optional[Sequence[str]] = None,
        position: Optional[Sequence[int]] = None,
    ):
        self.gt = np.asarray(gt, dtype=np.float64)
        if self.gt.ndim != 2:
            raise ValueError(f"Expected a 2D genotype matrix, got {self.gt.ndim}D")
        n_ind, n_loc = self.gt.shape

        self.ind_names = self._check_length(ind_names, n_ind, "ind_names")
        self.pop = self._check_length(pop, n_ind, "pop")
        self.marker_names = self._check_length(marker_names, n_loc, "marker_names")
        if loc_names is None:
            loc_names = self.marker_names
        self.loc_names = self._check_length(loc_names, n_loc, "loc_names")
        self.chromosome = self._check_length(chromosome, n_loc, "chromosome")
        self.position = self._check_length(position, n_loc, "position")

    @staticmethod
    def _check_length(values, expected: int, name: str) -> Optional[np.ndarray]:
        if values is None:
            return None
        values = np.asarray(values)
        if values.shape[0] != expected:
            raise ValueError(
                f"{name} has {values.shape[0]} entries but the genotype matrix needs {expected}")
        return values

    def __repr__(self) -> str:
        return f"<GenotypeMatrix: {self.n_ind} individuals, {self.n_loc} markers>"

    @property
    def n_ind(self) -> int:
        return self.gt.shape[0]

    @property
    def n_loc(self) -> int:
        return self.gt.shape[1]

    @property
    def pop_names(self) -> List[str]:
        return sorted(pd.unique(self.pop))

    def na_posi(self) -> List[np.ndarray]:
        """Column indices of the missing genotypes of every individual."""
        return [np.where(np.isnan(row))[0] for row in self.gt]

    def allele_frequency(self) -> np.ndarray:
        """Compute the frequency of the counted allele at every marker,
        using only individuals with a non-missing genotype. Markers
        without any called genotype get np.nan.

        Returns:
            allele_frequencies (np.ndarray): A 1D numpy array of size (G, ).
        """
        allele_counts, allele_numbers = compute_allele_counts(self.gt)
        with np.errstate(invalid="ignore", divide="ignore"):
            return allele_counts / allele_numbers

    def missing_rate(self) -> np.ndarray:
        return compute_missing_counts(self.gt) / self.n_ind

    def marker_metadata(self) -> pd.DataFrame:
        return pd.DataFrame({
            "MARKERS": self.marker_names,
            "CHROM": self.chromosome,
            "LOCUS": self.loc_names,
            "POS": self.position,
        })

    def to_dataframe(self) -> pd.DataFrame:
        """Wide table with INDIVIDUALS and POP_ID columns followed by one
        column of dosages per marker."""
        wide = pd.DataFrame(self.gt, columns=self.marker_names)
        wide.insert(0, "POP_ID", self.pop)
        wide.insert(0, "INDIVIDUALS", self.ind_names)
        return wide

    def to_genotype_array(self) -> allel.GenotypeArray:
        """Convert the dosages to a diploid scikit-allel GenotypeArray of
        shape (G, N, 2). A dosage of 1 becomes the heterozygote 0/1, and
        missing genotypes become -1/-1.
        """
        dosage = self.gt.T
        calls = np.full(dosage.shape + (2, ), -1, dtype="i1")
        called = ~np.isnan(dosage)
        calls[called, 0] = (dosage[called] == 2).astype("i1")
        calls[called, 1] = (dosage[called] >= 1).astype("i1")
        return allel.GenotypeArray(calls)
