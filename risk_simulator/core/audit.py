"""Determinism verification.

Re-runs a simulation with a fixed seed and compares result fingerprints.
"""

import hashlib
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .data_models import SimulationResult


class DeterminismVerifier:
    """Verifies simulation determinism and reproducibility."""

    @staticmethod
    def verify_reproducibility(
        config: Mapping[str, Any],
        risks_data: Optional[Sequence[Mapping[str, Any]]] = None,
        n_runs: int = 3,
    ) -> Dict[str, Any]:
        """Verify that the simulation produces identical results with the same seed.

        Args:
            config: Simulation configuration (must include ``seed``)
            risks_data: Risk rows
            n_runs: Number of verification runs

        Returns:
            Verification results
        """
        if config.get("seed") is None:
            return {
                "reproducible": False,
                "reason": "No random seed specified",
                "runs": [],
            }

        from .simulation import run_simulation

        runs: List[Dict[str, Any]] = []
        for run_num in range(max(1, n_runs)):
            result = run_simulation(risks_data, config)
            runs.append({
                "run_number": run_num + 1,
                "result_hash": DeterminismVerifier.hash_result(result),
                "success_pct": result.success_pct,
                "p90_late": result.p90_late,
                "runs": result.runs,
            })

        first_hash = runs[0]["result_hash"]
        all_identical = all(r["result_hash"] == first_hash for r in runs)

        verification = {
            "reproducible": all_identical,
            "runs": runs,
            "config_seed": config.get("seed"),
            "verification_timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if not all_identical:
            verification["reason"] = "Results differ between runs with same seed"
        return verification

    @staticmethod
    def hash_result(result: SimulationResult) -> str:
        """Stable fingerprint of every result field."""
        payload = json.dumps(result.model_dump(mode="json"), sort_keys=True)
        return hashlib.sha256(payload.encode()).hexdigest()[:16]
