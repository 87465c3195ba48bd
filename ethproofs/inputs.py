"""Proving inputs of a block and their on-disk layout."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from ethproofs.utils import MAX_NUM_SUBBLOCKS

PathLike = Union[str, "os.PathLike[str]"]

PUBLIC_VALUES_FILE = "public_values.bin"
AGG_INPUT_FILE = "final_aggregator_stdin_builder.bin"


def _subblock_file(index: int) -> str:
    return f"subblock_stdin_builder_{index}.bin"


def block_dir(block_number: int, directory: PathLike) -> Path:
    """Directory holding the input files of one block under a base directory."""
    return Path(directory) / f"block{block_number}" / "gas10000000"


@dataclass
class ProvingInputs:
    """Serialised subblock and aggregation inputs for proving one block."""

    block_number: int
    subblock_public_values: bytes
    agg_input: bytes
    subblock_inputs: List[bytes] = field(default_factory=list)

    def dump_to_dir(self, directory: PathLike) -> None:
        """Write the inputs below `directory`, creating directories as needed."""
        target = block_dir(self.block_number, directory)
        target.mkdir(parents=True, exist_ok=True)
        (target / PUBLIC_VALUES_FILE).write_bytes(self.subblock_public_values)
        (target / AGG_INPUT_FILE).write_bytes(self.agg_input)
        for index, data in enumerate(self.subblock_inputs):
            (target / _subblock_file(index)).write_bytes(data)

    @classmethod
    def load_from_dir(cls, block_number: int, directory: PathLike) -> "ProvingInputs":
        """Read inputs saved by dump_to_dir; subblocks are read until the first gap."""
        source = block_dir(block_number, directory)
        if not source.exists():
            raise FileNotFoundError(
                f"cannot read proving inputs from {source} since it doesn't exist"
            )

        subblock_public_values = (source / PUBLIC_VALUES_FILE).read_bytes()
        agg_input = (source / AGG_INPUT_FILE).read_bytes()

        subblock_inputs: List[bytes] = []
        for index in range(MAX_NUM_SUBBLOCKS):
            try:
                subblock_inputs.append((source / _subblock_file(index)).read_bytes())
            except OSError:
                break
        if not subblock_inputs:
            raise ValueError("must have one subblock at least")

        return cls(block_number, subblock_public_values, agg_input, subblock_inputs)