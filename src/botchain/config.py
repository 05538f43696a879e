"""Store settings resolved from CLI flags and environment."""

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from botchain.kernel.hash_utils import normalize_algorithm

ENV_STORE = "BOTCHAIN_STORE"
ENV_ALGORITHM = "BOTCHAIN_ALGORITHM"
DEFAULT_STORE = Path("botchain.jsonl")


class StoreSettings(BaseModel):
    """Where the chain lives and which digest it uses.

    ``algorithm`` None means "whatever the store header says"; a new store
    then uses the default digest.
    """
    path: Path = DEFAULT_STORE
    algorithm: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("algorithm")
    @classmethod
    def _check_algorithm(cls, value: Optional[str]) -> Optional[str]:
        # UnsupportedDigestError is a ValueError, so pydantic reports it as a validation error
        if value is None:
            return None
        return normalize_algorithm(value)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        *,
        path: Optional[Path] = None,
        algorithm: Optional[str] = None,
    ) -> "StoreSettings":
        """Build settings; explicit arguments override environment variables."""
        env = os.environ if environ is None else environ
        values = {}
        store = path if path is not None else env.get(ENV_STORE)
        if store:
            values["path"] = Path(store)
        algo = algorithm if algorithm is not None else env.get(ENV_ALGORITHM)
        if algo:
            values["algorithm"] = algo
        return cls(**values)
