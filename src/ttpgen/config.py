# src/ttpgen/config.py
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """
    Run settings. Every field can come from a TTPGEN_* environment variable
    (a .env file in the working directory is loaded first); command-line
    flags override them.
    """
    input: str = "data/NL4.xml"
    output_solutions: str = "solutions_output"
    output_permutations: str = "perms_output"
    permutations: int = 10
    seed: int = 42
    save: bool = False
    log_enabled: bool = False
    log_file: str = "log.txt"
    log_level: str = "INFO"
    workers: int = 1
    results_dir: str = "results"

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "Settings":
        load_dotenv(dotenv_path=dotenv_path)
        defaults = cls()
        return cls(
            input=os.getenv("TTPGEN_INPUT", defaults.input),
            output_solutions=os.getenv("TTPGEN_OUTPUT_SOLUTIONS", defaults.output_solutions),
            output_permutations=os.getenv("TTPGEN_OUTPUT_PERMUTATIONS", defaults.output_permutations),
            permutations=int(os.getenv("TTPGEN_PERMUTATIONS", str(defaults.permutations))),
            seed=int(os.getenv("TTPGEN_SEED", str(defaults.seed))),
            save=_flag(os.getenv("TTPGEN_SAVE", str(defaults.save))),
            log_enabled=_flag(os.getenv("TTPGEN_LOG", str(defaults.log_enabled))),
            log_file=os.getenv("TTPGEN_LOG_FILE", defaults.log_file),
            log_level=os.getenv("TTPGEN_LOG_LEVEL", defaults.log_level).strip().upper(),
            workers=int(os.getenv("TTPGEN_WORKERS", str(defaults.workers))),
            results_dir=os.getenv("TTPGEN_RESULTS_DIR", defaults.results_dir),
        )
