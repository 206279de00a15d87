"""PopStruct-Refinery: multi-resolution population structure from SNP data.

This package provides tools for:
- Hierarchical clustering of samples at several resolutions, where each
  level re-clusters every group of the level above
- A BAPS-style Bayesian partition oracle (ward or Genie seeding)
- Loading and saving sparse SNP dataset bundles

Parameters can be set in code or loaded from YAML configuration files.

Example usage:
    >>> from popstruct_refinery.io import load_dataset_bundle
    >>> from popstruct_refinery.core.multires import multi_res_partition
    >>>
    >>> dataset = load_dataset_bundle("data/bundle")
    >>> table = multi_res_partition(dataset, levels=2)
"""

__version__ = "0.1.0"
